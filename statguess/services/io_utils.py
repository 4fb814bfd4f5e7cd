"""
Utilitaires IO JSON (rapides) basés sur orjson.
- read_json(Path)  → Any | None (None si fichier manquant ou vide)
- write_json(Path, data) → écrit via un fichier temporaire puis rename (pas d'écriture partielle)
- read_ndjson(Path) / append_ndjson(Path, record) → journaux append-only (guesses)

Attention:
- orjson renvoie/attend des bytes; on lit/écrit en mode binaire.
- Les lignes NDJSON illisibles sont ignorées à la lecture (journal tolérant).
"""
from pathlib import Path
from typing import Any, Dict, List

import orjson as json


def read_json(path: Path) -> Any:
    """Lit un fichier JSON (ou None s'il n'existe pas)."""
    if not path.exists():
        return None
    with path.open("rb") as f:
        raw = f.read()
    if not raw.strip():
        return None
    return json.loads(raw)


def write_json(path: Path, data: Any) -> None:
    """Écrit un fichier JSON complet (dossier parent créé si absent)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("wb") as f:
        f.write(json.dumps(data, option=json.OPT_INDENT_2))
    tmp.replace(path)


def read_ndjson(path: Path) -> List[Dict[str, Any]]:
    """Lit un journal NDJSON (une entrée JSON par ligne)."""
    if not path.exists():
        return []
    records: List[Dict[str, Any]] = []
    with path.open("rb") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError:
                continue
    return records


def append_ndjson(path: Path, record: Dict[str, Any]) -> None:
    """Ajoute une entrée en fin de journal (création du fichier si besoin)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("ab") as fh:
        fh.write(json.dumps(record))
        fh.write(b"\n")
