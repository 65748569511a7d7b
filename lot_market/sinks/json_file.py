"""JSON Lines file sink for exporting lot events and snapshots."""

import json
from pathlib import Path
from typing import Any

from lot_market.exceptions import SinkError
from lot_market.sinks.serialization import to_dict


class JsonFileSink:
    """Append records to one ``.jsonl`` file per entity type.

    Events arrive one operation at a time, so batches are appended rather
    than overwriting earlier output.
    """

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write files into.
        pretty : bool
            Also write a pretty-printed ``<entity>.json`` array on close.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def path_for(self, entity_type: str) -> Path:
        # Use entity name as filename (replace dots with underscores)
        return self.output_dir / (entity_type.replace(".", "_") + ".jsonl")

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Append a batch of records to the entity's JSON Lines file."""
        try:
            with open(self.path_for(entity_type), "a", encoding="utf-8") as f:
                for record in records:
                    f.write(json.dumps(to_dict(record), ensure_ascii=False, default=str) + "\n")
        except OSError as e:
            raise SinkError(f"Failed to write {entity_type}: {e}") from e

        self._counts[entity_type] = self._counts.get(entity_type, 0) + len(records)

    def read(self, entity_type: str) -> list[dict]:
        """Read back every record written for ``entity_type``."""
        path = self.path_for(entity_type)
        if not path.exists():
            return []
        with open(path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]

    def close(self) -> None:
        """Write the pretty ``.json`` copies if requested, then print totals."""
        if self.pretty:
            for entity_type in self._counts:
                pretty_path = self.path_for(entity_type).with_suffix(".json")
                with open(pretty_path, "w", encoding="utf-8") as f:
                    json.dump(self.read(entity_type), f, indent=2, ensure_ascii=False)
        print(f"JSON files written to: {self.output_dir}")
        for entity_type, count in self._counts.items():
            print(f"  {entity_type}: {count} records")
