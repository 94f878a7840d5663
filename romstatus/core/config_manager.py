from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from romstatus import config
from romstatus.common.exceptions import ConfigurationError
from romstatus.options import Options


class ConfigManager:
    """Gere a persistência de configurações do utilizador em formato JSON."""

    def __init__(self, config_file: Path | str = "romstatus.json"):
        self.config_path = Path(config_file)
        self.values: dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Carrega as configurações do disco, fundindo com os defaults."""
        self.values = dict(config.DEFAULTS)

        if not self.config_path.exists():
            return
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                stored = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Configuração inválida: {e.msg}", {"path": str(self.config_path)}
            ) from e
        if not isinstance(stored, dict):
            raise ConfigurationError(
                "Configuração deve ser um objeto JSON", {"path": str(self.config_path)}
            )
        self.values.update(stored)

    def save(self) -> None:
        """Grava as configurações atuais no disco."""
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self.values, f, indent=4, ensure_ascii=False)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value

    def to_options(self, **overrides: Any) -> Options:
        """Constrói `Options`; overrides a None (flag não passada) são ignorados."""
        merged = dict(self.values)
        merged.update({k: v for k, v in overrides.items() if v is not None})
        return Options.from_mapping(merged)
