"""Loading schema documents from JSON or YAML files."""

import json
from pathlib import Path
from typing import Any

import yaml

from schema_platform.schemas.base import Property, parse_properties
from schema_platform.schemas.converter import to_wire


class DocumentLoader:
    """Loads JSON/YAML documents used by the CLI."""

    YAML_SUFFIXES = (".yaml", ".yml")

    def load_file(self, path: Path | str) -> Any:
        """Load a JSON or YAML document from disk.

        Args:
            path: Path to the file

        Returns:
            The parsed document
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        content = path.read_text()
        return self.load_from_string(content, path.suffix.lower())

    def load_from_string(self, content: str, suffix: str = ".json") -> Any:
        """Parse document content according to its file suffix."""
        if suffix in self.YAML_SUFFIXES:
            try:
                return yaml.safe_load(content)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML: {e}")

        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e}")

    def load_definition(self, path: Path | str) -> dict[str, Any]:
        """Load a schema file as a wire schema dict.

        A file holding a Property list (or an object with a ``properties``
        list) is converted to the wire format first.
        """
        data = self.load_file(path)

        if is_property_list(data):
            return to_wire(data).to_dict()
        if isinstance(data, dict) and is_property_list(data.get("properties")):
            return to_wire(data["properties"]).to_dict()

        if not isinstance(data, dict):
            raise ValueError("Schema file must contain a wire schema object or a property list")
        return data

    def load_properties(self, path: Path | str) -> list[Property]:
        """Load a file holding a Property list."""
        data = self.load_file(path)
        if isinstance(data, dict) and "properties" in data:
            data = data["properties"]
        return parse_properties(data)


def is_property_list(data: Any) -> bool:
    """Check if data looks like a Property list rather than a wire tree."""
    return isinstance(data, list) and all(
        isinstance(item, dict) and "name" in item for item in data
    )


def load_document(path: Path | str) -> Any:
    """Convenience function to load a JSON or YAML document."""
    return DocumentLoader().load_file(path)
