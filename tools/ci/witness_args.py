#!/usr/bin/env python3
"""Deterministic witness `run` argument assembly from a witness options record."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from witness_options import WitnessOptions

RUN_SUBCOMMAND = "run"
ARGS_SEPARATOR = "--"

# (field, flag, kind); emission order follows this table.
FLAG_TABLE: Tuple[Tuple[str, str, str], ...] = (
    ("step", "-s", "scalar"),
    ("outfile", "-o", "scalar"),
    ("trace", "--trace", "scalar"),
    ("workingdir", "--workingdir", "scalar"),
    ("attestations", "-a", "sequence"),
    ("export_link", "--attestor-link-export", "boolean"),
    ("export_sbom", "--attestor-sbom-export", "boolean"),
    ("export_slsa", "--attestor-slsa-export", "boolean"),
    ("maven_pom", "--attestor-maven-pom-path", "scalar"),
    ("product_exclude_glob", "--attestor-product-exclude-glob", "scalar"),
    ("product_include_glob", "--attestor-product-include-glob", "scalar"),
    ("enable_archivista", "--enable-archivista", "boolean"),
    ("archivista_server", "--archivista-server", "scalar"),
    ("archivista_headers", "--archivista-headers", "sequence"),
    ("certificate", "--signer-file-cert-path", "scalar"),
    ("key", "--signer-file-key-path", "scalar"),
    ("intermediates", "-i", "sequence"),
    ("fulcio", "--signer-fulcio-url", "scalar"),
    ("fulcio_oidc_client_id", "--signer-fulcio-oidc-client-id", "scalar"),
    ("fulcio_oidc_issuer", "--signer-fulcio-oidc-issuer", "scalar"),
    ("fulcio_oidc_redirect_url", "--signer-fulcio-oidc-redirect-url", "scalar"),
    ("fulcio_token", "--signer-fulcio-token", "scalar"),
    ("fulcio_token_path", "--signer-fulcio-token-path", "scalar"),
    ("kms_aws_config_file", "--signer-kms-aws-config-file", "scalar"),
    ("kms_aws_credentials_file", "--signer-kms-aws-credentials-file", "scalar"),
    ("kms_aws_insecure_skip_verify", "--signer-kms-aws-insecure-skip-verify", "boolean"),
    ("kms_aws_profile", "--signer-kms-aws-profile", "scalar"),
    ("kms_aws_remote_verify", "--signer-kms-aws-remote-verify", "boolean"),
    ("kms_gcp_credentials_file", "--signer-kms-gcp-credentials-file", "scalar"),
    ("kms_hash_type", "--signer-kms-hashType", "scalar"),
    ("kms_key_version", "--signer-kms-keyVersion", "scalar"),
    ("kms_ref", "--signer-kms-ref", "scalar"),
    ("spiffe_socket", "--signer-spiffe-socket-path", "scalar"),
    ("vault_altnames", "--signer-vault-altnames", "sequence"),
    ("vault_commonname", "--signer-vault-commonname", "scalar"),
    ("vault_namespace", "--signer-vault-namespace", "scalar"),
    ("vault_pki_secrets_engine_path", "--signer-vault-pki-secrets-engine-path", "scalar"),
    ("vault_role", "--signer-vault-role", "scalar"),
    ("vault_token", "--signer-vault-token", "scalar"),
    ("vault_ttl", "--signer-vault-ttl", "scalar"),
    ("vault_url", "--signer-vault-url", "scalar"),
    ("timestamp_servers", "--timestamp-servers", "sequence"),
    ("hashes", "--hashes", "sequence"),
    ("env_add_sensitive_key", "--env-add-sensitive-key", "sequence"),
    ("env_disable_default_sensitive_vars", "--env-disable-default-sensitive-vars", "boolean"),
    ("env_exclude_sensitive_key", "--env-exclude-sensitive-key", "sequence"),
    ("env_filter_sensitive_vars", "--env-filter-sensitive-vars", "boolean"),
    ("dirhash_glob", "--dirhash-glob", "sequence"),
)


def _flag_tokens(flag: str, kind: str, value: object) -> List[str]:
    if kind == "boolean":
        return [f"{flag}=true"] if value is True else []
    if kind == "sequence":
        tokens: List[str] = []
        for item in value or ():
            text = str(item).strip()
            if text:
                tokens.append(f"{flag}={text}")
        return tokens
    text = "" if value is None else str(value).strip()
    return [f"{flag}={text}"] if text else []


def assemble_witness_args(
    options: WitnessOptions,
    trailing: Sequence[str] = (),
) -> List[str]:
    """Return `run <flags...> [witness-args...] -- <trailing...>`; trailing tokens are kept verbatim."""
    args = [RUN_SUBCOMMAND]
    for field_name, flag, kind in FLAG_TABLE:
        args.extend(_flag_tokens(flag, kind, getattr(options, field_name)))
    args.extend(token for token in options.witness_args if token)
    args.append(ARGS_SEPARATOR)
    args.extend(trailing)
    return args
