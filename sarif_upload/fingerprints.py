"""sarif_upload/fingerprints.py

Fills ``partialFingerprints.primaryLocationLineHash`` for results whose
primary location is a file inside the checkout.

The hash of a line is a rolling polynomial hash (base 37, wrapping at 64
bits) over the next :data:`BLOCK_SIZE` characters starting at that line,
ignoring spaces and tabs and treating CR / CRLF as LF. The value is written as
``<hex>:<n>`` where ``n`` counts how often that hex value has been seen in the
file so far, so identical tails stay distinguishable.

Results that already carry a different fingerprint keep it; the mismatch is
logged.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Callable, DefaultDict, Dict, Iterator, List, Mapping, Optional, Union
from urllib.parse import unquote

logger = logging.getLogger(__name__)

HashCallback = Callable[[int, str], None]

BLOCK_SIZE = 100
MOD = 37

_MASK = (1 << 64) - 1
_FIRST_MOD = pow(MOD, BLOCK_SIZE, 1 << 64)

_TAB = ord("\t")
_SPACE = ord(" ")
_LF = ord("\n")
_CR = ord("\r")
_EOF = 0xFFFF


def _code_units(text: str) -> Iterator[int]:
    # UTF-16 code units, so characters outside the BMP hash as surrogate pairs
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


class _LineHasher:
    def __init__(self, callback: HashCallback) -> None:
        self.callback = callback
        self.window = [0] * BLOCK_SIZE
        # line number starting at each window slot, or -1
        self.line_numbers = [-1] * BLOCK_SIZE
        self.hash_raw = 0
        self.index = 0
        self.line_number = 0
        self.line_start = True
        self.prev_cr = False
        self.hash_counts: Dict[str, int] = {}

    def _output_hash(self) -> None:
        value = format(self.hash_raw, "x")
        self.hash_counts[value] = self.hash_counts.get(value, 0) + 1
        self.callback(self.line_numbers[self.index], f"{value}:{self.hash_counts[value]}")
        self.line_numbers[self.index] = -1

    def _update_hash(self, current: int) -> None:
        begin = self.window[self.index]
        self.window[self.index] = current
        self.hash_raw = (MOD * self.hash_raw + current - _FIRST_MOD * begin) & _MASK
        self.index = (self.index + 1) % BLOCK_SIZE

    def process(self, current: int) -> None:
        if current in (_SPACE, _TAB) or (self.prev_cr and current == _LF):
            self.prev_cr = False
            return
        if current == _CR:
            current = _LF
            self.prev_cr = True
        else:
            self.prev_cr = False

        if self.line_numbers[self.index] != -1:
            self._output_hash()
        if self.line_start:
            self.line_start = False
            self.line_number += 1
            self.line_numbers[self.index] = self.line_number
        if current == _LF:
            self.line_start = True
        self._update_hash(current)

    def finish(self) -> None:
        self.process(_EOF)
        for _ in range(BLOCK_SIZE):
            if self.line_numbers[self.index] != -1:
                self._output_hash()
            self._update_hash(0)


def hash_lines(callback: HashCallback, text: str) -> None:
    """Call ``callback(line_number, hash)`` once per line of ``text``.

    A trailing newline starts one more (empty) line, as does an empty input.
    """
    hasher = _LineHasher(callback)
    for unit in _code_units(text):
        hasher.process(unit)
    hasher.finish()


def resolve_uri_to_file(
    location: Mapping[str, Any],
    artifacts: List[Any],
    source_root: str,
) -> Optional[str]:
    """Map a SARIF artifactLocation to an existing file under ``source_root``."""
    if not location.get("uri") and location.get("index") is not None:
        idx = location.get("index")
        if (
            not isinstance(idx, int)
            or isinstance(idx, bool)
            or idx < 0
            or idx >= len(artifacts)
            or not isinstance(artifacts[idx], dict)
            or not isinstance(artifacts[idx].get("location"), dict)
        ):
            logger.debug('Ignoring location as index "%s" is invalid', idx)
            return None
        location = artifacts[idx]["location"]

    uri = location.get("uri")
    if not isinstance(uri, str):
        logger.debug('Ignoring location as URI "%s" is invalid', uri)
        return None
    uri = unquote(uri)

    if uri.startswith("file://"):
        uri = uri[len("file://"):]
    if "://" in uri:
        logger.debug('Ignoring location URI "%s" as the scheme is not recognised', uri)
        return None

    prefix = f"{source_root}/"
    if uri.startswith("/") and not uri.startswith(prefix):
        logger.debug('Ignoring location URI "%s" as it is outside of the src root', uri)
        return None
    # relative URIs are taken to be relative to the checkout
    if not uri.startswith("/"):
        uri = prefix + uri

    path = Path(uri)
    if not path.exists():
        logger.debug("Unable to compute fingerprint for non-existent file: %s", uri)
        return None
    if path.is_dir():
        logger.debug("Unable to compute fingerprint for directory: %s", uri)
        return None
    return uri


def _location_update_callback(result: Dict[str, Any], location: Mapping[str, Any]) -> HashCallback:
    start_line = ((location.get("physicalLocation") or {}).get("region") or {}).get("startLine")
    if start_line is None:
        start_line = 1

    def update(line_number: int, hash_value: str) -> None:
        if line_number != start_line:
            return
        fingerprints = result.setdefault("partialFingerprints", {})
        existing = fingerprints.get("primaryLocationLineHash")
        if not existing:
            fingerprints["primaryLocationLineHash"] = hash_value
        elif existing != hash_value:
            uri = (location["physicalLocation"].get("artifactLocation") or {}).get("uri")
            logger.warning(
                "Calculated fingerprint of %s for file %s line %s, but found existing "
                "inconsistent fingerprint value %s",
                hash_value,
                uri,
                line_number,
                existing,
            )

    return update


def add_fingerprints(sarif: str, checkout_path: Union[str, Path]) -> str:
    """Return ``sarif`` (JSON text) with line-hash fingerprints added."""
    source_root = str(Path(checkout_path).resolve())
    doc = json.loads(sarif)

    callbacks_by_file: DefaultDict[str, List[HashCallback]] = defaultdict(list)
    for run in doc.get("runs") or []:
        artifacts = run.get("artifacts") or []
        for result in run.get("results") or []:
            primary = (result.get("locations") or [None])[0]
            physical = (primary or {}).get("physicalLocation") or {}
            artifact_location = physical.get("artifactLocation")
            if not isinstance(artifact_location, dict):
                logger.debug("Unable to compute fingerprint for invalid location: %s", json.dumps(primary))
                continue
            # locations without a line number are unlikely to be source files
            if (physical.get("region") or {}).get("startLine") is None:
                continue

            filepath = resolve_uri_to_file(artifact_location, artifacts, source_root)
            if filepath:
                callbacks_by_file[filepath].append(_location_update_callback(result, primary))

    for filepath, callbacks in callbacks_by_file.items():
        text = Path(filepath).read_bytes().decode("utf-8", errors="replace")

        def tee(line_number: int, hash_value: str, callbacks: List[HashCallback] = callbacks) -> None:
            for c in callbacks:
                c(line_number, hash_value)

        hash_lines(tee, text)

    return json.dumps(doc)
