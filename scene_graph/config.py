"""
Centralized configuration for the scene-graph store.

Policy switches and logging settings in one place.
Loadable from a plain dict (e.g. a JSON file passed to the CLI).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Literal


@dataclass
class PolicyConfig:
    """Structural policies applied by the node operations."""

    # Re-creating an existing object id replaces the node (False = AlreadyExists)
    allow_overwrite: bool = True
    # Parenting a node under itself or a descendant raises CyclicParent
    reject_cycles: bool = True


@dataclass
class LoggingConfig:
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    def __post_init__(self):
        if self.level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"Unknown log level: {self.level}")


@dataclass
class Config:
    """Complete configuration."""

    policy: PolicyConfig = field(default_factory=PolicyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict:
        return {"policy": asdict(self.policy), "logging": asdict(self.logging)}

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Build from a nested dict; unknown keys raise ValueError."""
        sections = {"policy": PolicyConfig, "logging": LoggingConfig}
        unknown = set(data) - set(sections)
        if unknown:
            raise ValueError(f"Unknown config sections: {', '.join(sorted(unknown))}")
        kwargs = {}
        for name, section_cls in sections.items():
            values = data.get(name, {})
            known = {f.name for f in fields(section_cls)}
            bad = set(values) - known
            if bad:
                raise ValueError(f"Unknown keys in [{name}]: {', '.join(sorted(bad))}")
            kwargs[name] = section_cls(**values)
        return cls(**kwargs)

    @classmethod
    def for_strict(cls) -> Config:
        """Duplicate object ids are errors; cycles rejected."""
        return cls(policy=PolicyConfig(allow_overwrite=False, reject_cycles=True))

    @classmethod
    def for_permissive(cls) -> Config:
        """Reproduces the historical behavior: overwrite silently, allow cycles."""
        return cls(policy=PolicyConfig(allow_overwrite=True, reject_cycles=False))
