"""Configuration for the reflow pipeline."""
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml


@dataclass(frozen=True)
class ReflowConfig:
    """Thresholds, patterns and I/O settings shared by every document in a run."""

    # classification
    title_font_size_threshold: float = 20
    min_font_size: float = 16
    default_color: str = "#000"
    default_alignment: str = "left"
    ordered_list_pattern: str = r"^[0-9]+\."  # ASCII digits only
    unordered_list_pattern: str = "^[■●•+]"  # ■ ● • +

    # I/O
    input_dir: str = "./input"
    output_dir: str = "./output"
    output_suffix: str = ".html"
    document_extensions: Tuple[str, ...] = (".pdf",)
    document_title: str = "Converted PDF"
    workers: int = 4

    # static server
    host: str = "0.0.0.0"
    port: int = 3000

    def __post_init__(self) -> None:
        for name in ("ordered_list_pattern", "unordered_list_pattern"):
            try:
                re.compile(getattr(self, name))
            except re.error as e:
                raise ValueError(f"Invalid {name}: {e}") from e
        if self.workers < 1:
            raise ValueError("workers must be at least 1")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReflowConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        values = dict(data)
        if "document_extensions" in values:
            values["document_extensions"] = tuple(
                ext.lower() for ext in values["document_extensions"]
            )
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "ReflowConfig":
        """Return a copy with every non-``None`` override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_config(path: Optional[Union[Path, str]] = None) -> ReflowConfig:
    """Load configuration from YAML; without a path the built-in defaults are used."""
    if path is None:
        return ReflowConfig()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid configuration YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Configuration YAML must produce a mapping")
    return ReflowConfig.from_dict(data)
