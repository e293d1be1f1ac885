import json
from pathlib import Path


class BanConfigError(ValueError):
    pass


def _validated_pair(entry):
    if not isinstance(entry, (list, tuple)) or len(entry) != 2:
        raise BanConfigError(
            f"Each ban entry must be an ['object', 'function'] pair, got {entry!r}"
        )
    receiver, member = entry
    for value in (receiver, member):
        if not isinstance(value, str) or not value.strip():
            raise BanConfigError(f"Ban entry names must be non-empty strings, got {entry!r}")
    return receiver.strip(), member.strip()


def parse_ban_options(raw):
    """
    Turn rule options into (receiver, member) pairs.

    Accepts a plain list of pairs, or the same list prefixed by the
    rule's enable flag, e.g. [true, ["console", "log"]]. A disabled rule
    ([false, ...]) bans nothing.
    """
    if not isinstance(raw, list):
        raise BanConfigError("Ban options must be a list of ['object', 'function'] pairs")

    entries = list(raw)
    if entries and isinstance(entries[0], bool):
        enabled = entries.pop(0)
        if not enabled:
            return []

    return [_validated_pair(entry) for entry in entries]


def parse_ban_argument(text):
    """
    Parse the command-line form: "console.log,someObject.someFunction".
    """
    pairs = []
    for part in (text or "").split(","):
        part = part.strip()
        if not part:
            continue
        pieces = part.split(".")
        if len(pieces) != 2:
            raise BanConfigError(
                f"Invalid ban entry '{part}' (expected object.function with exactly one dot)"
            )
        pairs.append(_validated_pair(pieces))

    if not pairs:
        raise BanConfigError("Expected at least one object.function entry after --ban")
    return pairs


def load_ban_config(path):
    config_path = Path(path)
    if not config_path.exists():
        raise BanConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except json.JSONDecodeError as exc:
        raise BanConfigError(f"Config file is not valid JSON: {config_path} ({exc})") from exc

    if isinstance(raw, dict):
        if "ban" not in raw:
            raise BanConfigError(f"Config object in {config_path} has no 'ban' key")
        raw = raw["ban"]

    return parse_ban_options(raw)
