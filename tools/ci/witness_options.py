#!/usr/bin/env python3
"""Normalize raw action inputs into a canonical witness options record."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from yaml_boolean import is_truthy_input

DEFAULT_FULCIO_URL = "https://fulcio.sigstore.dev"
DEFAULT_FULCIO_OIDC_CLIENT_ID = "sigstore"
DEFAULT_FULCIO_OIDC_ISSUER = "https://oauth2.sigstore.dev/auth"
DEFAULT_TIMESTAMP_SERVER = "https://freetsa.org/tsr"


class WitnessOptionsError(ValueError):
    """Options normalization error with deterministic failure class."""

    def __init__(self, failure_class: str, message: str) -> None:
        self.failure_class = failure_class
        self.reason = message
        super().__init__(f"{failure_class}: {message}")


@dataclass(frozen=True)
class WitnessOptions:
    step: str = ""
    outfile: str = ""
    trace: str = ""
    workingdir: str = ""

    enable_archivista: bool = False
    archivista_server: str = ""
    archivista_headers: Tuple[str, ...] = ()

    attestations: Tuple[str, ...] = ()

    export_link: bool = False
    export_sbom: bool = False
    export_slsa: bool = False
    maven_pom: str = ""
    product_exclude_glob: str = ""
    product_include_glob: str = ""

    enable_sigstore: bool = False

    certificate: str = ""
    key: str = ""
    intermediates: Tuple[str, ...] = ()

    fulcio: str = ""
    fulcio_oidc_client_id: str = ""
    fulcio_oidc_issuer: str = ""
    fulcio_oidc_redirect_url: str = ""
    fulcio_token: str = ""
    fulcio_token_path: str = ""

    kms_aws_config_file: str = ""
    kms_aws_credentials_file: str = ""
    kms_aws_insecure_skip_verify: bool = False
    kms_aws_profile: str = ""
    kms_aws_remote_verify: bool = False
    kms_gcp_credentials_file: str = ""
    kms_hash_type: str = ""
    kms_key_version: str = ""
    kms_ref: str = ""

    spiffe_socket: str = ""

    vault_altnames: Tuple[str, ...] = ()
    vault_commonname: str = ""
    vault_namespace: str = ""
    vault_pki_secrets_engine_path: str = ""
    vault_role: str = ""
    vault_token: str = ""
    vault_ttl: str = ""
    vault_url: str = ""

    timestamp_servers: Tuple[str, ...] = ()
    hashes: Tuple[str, ...] = ()

    env_add_sensitive_key: Tuple[str, ...] = ()
    env_disable_default_sensitive_vars: bool = False
    env_exclude_sensitive_key: Tuple[str, ...] = ()
    env_filter_sensitive_vars: bool = False

    dirhash_glob: Tuple[str, ...] = ()

    witness_args: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            out[item.name] = list(value) if isinstance(value, tuple) else value
        return out


def split_words(value: str) -> Tuple[str, ...]:
    return tuple(token for token in value.split() if token)


def split_lines(value: str) -> Tuple[str, ...]:
    return tuple(line.strip() for line in value.splitlines() if line.strip())


def _text(value: str) -> str:
    return value.strip()


RESOLVERS: Dict[str, Callable[[str], Any]] = {
    "text": _text,
    "flag": is_truthy_input,
    "words": split_words,
    "lines": split_lines,
}

# (field, input name, resolver kind)
OPTION_INPUTS: Tuple[Tuple[str, str, str], ...] = (
    ("step", "step", "text"),
    ("outfile", "outfile", "text"),
    ("trace", "trace", "text"),
    ("workingdir", "workingdir", "text"),
    ("enable_archivista", "enable-archivista", "flag"),
    ("archivista_server", "archivista-server", "text"),
    ("archivista_headers", "archivista-headers", "lines"),
    ("attestations", "attestations", "words"),
    ("export_link", "attestor-link-export", "flag"),
    ("export_sbom", "attestor-sbom-export", "flag"),
    ("export_slsa", "attestor-slsa-export", "flag"),
    ("maven_pom", "attestor-maven-pom-path", "text"),
    ("product_exclude_glob", "product-exclude-glob", "text"),
    ("product_include_glob", "product-include-glob", "text"),
    ("enable_sigstore", "enable-sigstore", "flag"),
    ("certificate", "certificate", "text"),
    ("key", "key", "text"),
    ("intermediates", "intermediates", "words"),
    ("fulcio", "fulcio", "text"),
    ("fulcio_oidc_client_id", "fulcio-oidc-client-id", "text"),
    ("fulcio_oidc_issuer", "fulcio-oidc-issuer", "text"),
    ("fulcio_oidc_redirect_url", "fulcio-oidc-redirect-url", "text"),
    ("fulcio_token", "fulcio-token", "text"),
    ("fulcio_token_path", "fulcio-token-path", "text"),
    ("kms_aws_config_file", "kms-aws-config-file", "text"),
    ("kms_aws_credentials_file", "kms-aws-credentials-file", "text"),
    ("kms_aws_insecure_skip_verify", "kms-aws-insecure-skip-verify", "flag"),
    ("kms_aws_profile", "kms-aws-profile", "text"),
    ("kms_aws_remote_verify", "kms-aws-remote-verify", "flag"),
    ("kms_gcp_credentials_file", "kms-gcp-credentials-file", "text"),
    ("kms_hash_type", "kms-hash-type", "text"),
    ("kms_key_version", "kms-key-version", "text"),
    ("kms_ref", "kms-ref", "text"),
    ("spiffe_socket", "spiffe-socket", "text"),
    ("vault_altnames", "vault-altnames", "words"),
    ("vault_commonname", "vault-commonname", "text"),
    ("vault_namespace", "vault-namespace", "text"),
    ("vault_pki_secrets_engine_path", "vault-pki-secrets-engine-path", "text"),
    ("vault_role", "vault-role", "text"),
    ("vault_token", "vault-token", "text"),
    ("vault_ttl", "vault-ttl", "text"),
    ("vault_url", "vault-url", "text"),
    ("timestamp_servers", "timestamp-servers", "words"),
    ("hashes", "hashes", "words"),
    ("env_add_sensitive_key", "env-add-sensitive-key", "words"),
    ("env_disable_default_sensitive_vars", "env-disable-default-sensitive-vars", "flag"),
    ("env_exclude_sensitive_key", "env-exclude-sensitive-key", "words"),
    ("env_filter_sensitive_vars", "env-filter-sensitive-vars", "flag"),
    ("dirhash_glob", "dirhash-glob", "words"),
    ("witness_args", "witness-args", "words"),
)

OPTION_INPUT_NAMES: Tuple[str, ...] = tuple(name for _, name, _ in OPTION_INPUTS)


def default_outfile(step: str, tmpdir: Optional[str] = None) -> str:
    return os.path.join(tmpdir or tempfile.gettempdir(), f"{step}-attestation.json")


def apply_sigstore_defaults(options: WitnessOptions) -> WitnessOptions:
    if not options.enable_sigstore:
        return options
    timestamp_servers = (
        DEFAULT_TIMESTAMP_SERVER,
        *(server for server in options.timestamp_servers if server != DEFAULT_TIMESTAMP_SERVER),
    )
    return replace(
        options,
        fulcio=options.fulcio or DEFAULT_FULCIO_URL,
        fulcio_oidc_client_id=options.fulcio_oidc_client_id or DEFAULT_FULCIO_OIDC_CLIENT_ID,
        fulcio_oidc_issuer=options.fulcio_oidc_issuer or DEFAULT_FULCIO_OIDC_ISSUER,
        timestamp_servers=timestamp_servers,
    )


def get_witness_options(
    inputs: Optional[Mapping[str, str]],
    *,
    tmpdir: Optional[str] = None,
) -> WitnessOptions:
    """Resolve every option field from the input lookup (missing input -> "")."""
    if inputs is None:
        raise WitnessOptionsError("inputs_missing", "input lookup is required")

    values: Dict[str, Any] = {}
    for field_name, input_name, kind in OPTION_INPUTS:
        raw = inputs.get(input_name)
        values[field_name] = RESOLVERS[kind](raw if isinstance(raw, str) else "")

    if not values["outfile"]:
        values["outfile"] = default_outfile(values["step"], tmpdir)

    return apply_sigstore_defaults(WitnessOptions(**values))
