"""Controller configuration models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

ENV_PREFIX = "SECRET_REPLICATOR_"


class ClusterConfig(BaseModel):
    """Configuration for a single Kubernetes cluster."""

    model_config = ConfigDict(extra="forbid")

    context: str = ""
    kubeconfig: str = "~/.kube/config"
    namespace: str = "default"

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str) -> str:
        """Expand ~ in kubeconfig path."""
        return str(Path(v).expanduser())


class ControllerDefaultsConfig(BaseModel):
    """Timeouts and retry settings for the controller."""

    model_config = ConfigDict(extra="forbid")

    ctx_timeout: float = 30.0
    retry_attempts: int = 3

    @field_validator("ctx_timeout")
    @classmethod
    def validate_ctx_timeout(cls, v: float) -> float:
        """Validate the per-pass timeout is positive."""
        if v <= 0:
            raise ValueError("ctx_timeout must be positive")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts is non-negative."""
        if v < 0:
            raise ValueError("retry_attempts must be non-negative")
        return v


class ResourceConfig(BaseModel):
    """Coordinates of the ManagedSecret custom resource.

    The API group doubles as the prefix of the annotation and label keys
    the controller reads and writes.
    """

    model_config = ConfigDict(extra="forbid")

    group: str = "secretreplicator.io"
    version: str = "v1alpha1"
    plural: str = "managedsecrets"
    kind: str = "ManagedSecret"

    @field_validator("group", "version", "plural", "kind")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Reject empty coordinates."""
        if not v.strip():
            raise ValueError("resource coordinates must not be empty")
        return v

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"

    @property
    def copy_of_annotation(self) -> str:
        """Annotation naming the source resource allowed to write a replica."""
        return f"{self.group}/secret-copy-of"

    @property
    def secret_kind_label(self) -> str:
        """Label the generator puts on secrets it produced."""
        return f"{self.group}/secret-kind"


class LoggingConfig(BaseModel):
    """Log rendering for the controller.

    Fields left unset follow the environment: JSON on stdout without a log
    file inside a pod, console output plus a log file elsewhere.
    """

    model_config = ConfigDict(extra="forbid")

    format: Literal["console", "json"] | None = None
    file: bool | None = None
    directory: str | None = None

    @field_validator("directory")
    @classmethod
    def validate_directory(cls, v: str | None) -> str | None:
        """Expand ~ in the log directory."""
        return str(Path(v).expanduser()) if v else None

    @property
    def json_output(self) -> bool | None:
        return None if self.format is None else self.format == "json"

    @property
    def log_dir(self) -> Path | None:
        return Path(self.directory) if self.directory else None


class ReplicatorConfig(BaseModel):
    """Complete controller configuration."""

    model_config = ConfigDict(extra="forbid")

    clusters: dict[str, ClusterConfig] = {}
    active_cluster: str | None = None
    defaults: ControllerDefaultsConfig = ControllerDefaultsConfig()
    resource: ResourceConfig = ResourceConfig()
    logging: LoggingConfig = LoggingConfig()
    output_format: Literal["table", "json"] = "table"

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        """Validate output format."""
        valid_formats = {"table", "json"}
        if v not in valid_formats:
            raise ValueError(f"output_format must be one of: {', '.join(sorted(valid_formats))}")
        return v

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> ReplicatorConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            SECRET_REPLICATOR_CONTEXT: Override active Kubernetes context
            SECRET_REPLICATOR_NAMESPACE: Override default namespace
            SECRET_REPLICATOR_KUBECONFIG: Override kubeconfig path
            SECRET_REPLICATOR_CTX_TIMEOUT: Per-pass timeout in seconds
            SECRET_REPLICATOR_OUTPUT: Output format (table, json)
            SECRET_REPLICATOR_LOG_FORMAT: Log rendering (console, json)
            SECRET_REPLICATOR_LOG_FILE: Write the rotating log file (true, false)
        """
        config_dict = dict(base_config) if base_config else {}
        config_dict["defaults"] = dict(config_dict.get("defaults") or {})
        config_dict["logging"] = dict(config_dict.get("logging") or {})
        config_dict.setdefault("clusters", {})

        kubeconfig_override = os.environ.get(f"{ENV_PREFIX}KUBECONFIG")
        namespace_override = os.environ.get(f"{ENV_PREFIX}NAMESPACE")

        if context := os.environ.get(f"{ENV_PREFIX}CONTEXT"):
            config_dict["active_cluster"] = context

        if ctx_timeout := os.environ.get(f"{ENV_PREFIX}CTX_TIMEOUT"):
            config_dict["defaults"]["ctx_timeout"] = float(ctx_timeout)

        if output_format := os.environ.get(f"{ENV_PREFIX}OUTPUT"):
            config_dict["output_format"] = output_format

        if log_format := os.environ.get(f"{ENV_PREFIX}LOG_FORMAT"):
            config_dict["logging"]["format"] = log_format

        if log_file := os.environ.get(f"{ENV_PREFIX}LOG_FILE"):
            config_dict["logging"]["file"] = log_file

        instance = cls.model_validate(config_dict)

        if (kubeconfig_override or namespace_override) and not instance.clusters:
            instance.clusters["default"] = ClusterConfig()

        if kubeconfig_override:
            for cluster_cfg in instance.clusters.values():
                cluster_cfg.kubeconfig = str(Path(kubeconfig_override).expanduser())

        if namespace_override:
            for cluster_cfg in instance.clusters.values():
                cluster_cfg.namespace = namespace_override

        return instance

    @classmethod
    def from_file(cls, path: Path) -> ReplicatorConfig:
        """Load a YAML config file, then apply environment overrides.

        Args:
            path: Path to the YAML configuration file.

        Raises:
            ValueError: If the file does not contain a mapping.
        """
        with path.open() as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls.from_env(raw)

    def get_active_context(self) -> str | None:
        """Get the active cluster context name.

        Returns the active_cluster if set, or the context from the first
        configured cluster, or None if no clusters are configured.
        """
        if self.active_cluster:
            if cluster := self.clusters.get(self.active_cluster):
                return cluster.context
            return self.active_cluster
        if self.clusters:
            first = next(iter(self.clusters.values()))
            return first.context
        return None

    def get_active_kubeconfig(self) -> str | None:
        """Get the kubeconfig path of the active cluster, if one is configured."""
        if self.active_cluster and self.active_cluster in self.clusters:
            return self.clusters[self.active_cluster].kubeconfig
        if self.clusters and not self.active_cluster:
            first = next(iter(self.clusters.values()))
            return first.kubeconfig
        return None

    def get_active_namespace(self) -> str:
        """Get the default namespace for the active cluster."""
        if self.active_cluster and self.active_cluster in self.clusters:
            return self.clusters[self.active_cluster].namespace
        if self.clusters:
            first = next(iter(self.clusters.values()))
            return first.namespace
        return "default"
