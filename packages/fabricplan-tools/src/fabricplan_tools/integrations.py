"""External dry-run validation hooks for ``evaluate_topology``."""

from __future__ import annotations

import logging
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import yaml

from fabricplan_core.models.records import DerivedTopology, FabricSpec
from fabricplan_core.validation.evaluation import IntegrationResult

_logger = logging.getLogger("fabricplan.integrations")


def dump_fabric_spec(spec: FabricSpec, path: Path) -> Path:
    """Write ``spec`` as a camelCase YAML manifest."""
    data = {"fabric": spec.model_dump(mode="json", by_alias=True, exclude_none=True)}
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


@dataclass
class CommandDryRunHook:
    """
    Run an external validator against the spec written to a temporary YAML file.

    The manifest path is appended to ``command``. A zero exit code passes; a
    missing executable is reported as skipped, not failed.
    """

    command: Sequence[str]
    name: str = "dry-run"
    timeout_s: float = 60.0
    env: dict[str, str] | None = field(default=None, repr=False)

    def run(self, spec: FabricSpec, derived: DerivedTopology) -> IntegrationResult:
        with tempfile.TemporaryDirectory(prefix="fabricplan-") as workdir:
            manifest = dump_fabric_spec(spec, Path(workdir) / "fabric.yaml")
            cmd = [*self.command, str(manifest)]
            _logger.debug("running %s", cmd)
            try:
                proc = subprocess.run(
                    cmd, cwd=workdir, text=True, capture_output=True, check=False, timeout=self.timeout_s, env=self.env
                )
            except FileNotFoundError:
                return IntegrationResult(
                    name=self.name, passed=False, skipped=True, message=f"{self.command[0]} not found"
                )
            except subprocess.TimeoutExpired:
                return IntegrationResult(
                    name=self.name, passed=False, message=f"timed out after {self.timeout_s:g}s"
                )

        output = (proc.stdout or "") + (proc.stderr or "")
        return IntegrationResult(
            name=self.name,
            passed=proc.returncode == 0,
            message=output.strip().splitlines()[-1] if output.strip() else "",
            details={
                "command": cmd,
                "returncode": proc.returncode,
                "stdout": proc.stdout,
                "stderr": proc.stderr,
                "leaves_needed": derived.leaves_needed,
                "spines_needed": derived.spines_needed,
            },
        )
