"""
Verification structurelle des artefacts de backup.

Un artefact est considere exploitable si:
- il existe et n'est pas vide
- JSON (commence par '{'): export applicatif avec la collection principale
- sinon SQL natif: au moins une instruction CREATE TABLE

Toute erreur de lecture rend l'artefact invalide (jamais d'exception).
"""

import json
from pathlib import Path
from typing import Optional, TextIO

from calendariko.domain.entities.backup import BackupFormat, VerificationResult
from calendariko.infrastructure.backup.strategies import validate_json_document

NATIVE_MARKER = "CREATE TABLE"
_CHUNK_SIZE = 4096


def verify_artifact(path: Path) -> VerificationResult:
    """
    Verifie un artefact sur disque.

    Args:
        path: Chemin de l'artefact.

    Returns:
        VerificationResult avec le format detecte.
    """
    try:
        size = path.stat().st_size
    except OSError:
        return VerificationResult.invalid("fichier introuvable")

    if size == 0:
        return VerificationResult.invalid("fichier vide")

    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            if _first_significant_char(f) == "{":
                f.seek(0)
                return _verify_json(f)
            f.seek(0)
            return _verify_native(f)
    except OSError as e:
        return VerificationResult.invalid(f"lecture impossible: {e}")


def _first_significant_char(f: TextIO) -> Optional[str]:
    while True:
        chunk = f.read(_CHUNK_SIZE)
        if not chunk:
            return None
        stripped = chunk.lstrip()
        if stripped:
            return stripped[0]


def _verify_json(f: TextIO) -> VerificationResult:
    try:
        document = json.load(f)
    except ValueError as e:
        return VerificationResult.invalid(f"JSON mal forme: {e}", BackupFormat.JSON)

    error = validate_json_document(document)
    if error:
        return VerificationResult.invalid(error, BackupFormat.JSON)
    return VerificationResult.ok(BackupFormat.JSON)


def _verify_native(f: TextIO) -> VerificationResult:
    for line in f:
        if NATIVE_MARKER in line:
            return VerificationResult.ok(BackupFormat.NATIVE)
    return VerificationResult.invalid(
        "aucune instruction CREATE TABLE", BackupFormat.NATIVE
    )
