"""
CSV ingestion: turns uploaded text into movie entries.

Each line follows the `date,title,url` convention. There is no quoting or
escaping: a comma inside a title or URL starts a new field.
"""

import logging
import re

from errors import EmptyImportError
from models import MovieEntry

logger = logging.getLogger(__name__)

MIN_FIELDS = 3
TITLE_FIELD = 1
URL_FIELD = 2
LINE_BREAK = re.compile(r"\r\n|\r|\n")


def parse_line(line):
    """
    Parse a single CSV line.

    Args:
        line: Raw line text

    Returns:
        MovieEntry, or None for blank and malformed lines
    """
    line = line.strip()
    if not line:
        return None

    fields = line.split(",")
    if len(fields) < MIN_FIELDS:
        return None

    title = fields[TITLE_FIELD].strip()
    if not title:
        return None

    return MovieEntry(title=title, note="", url=fields[URL_FIELD].strip())


def parse_movie_csv(text):
    """
    Parse CSV text into an ordered list of movie entries.

    Malformed lines are dropped silently. Duplicate titles are kept.

    Args:
        text: Full CSV contents

    Returns:
        List of MovieEntry in input line order (possibly empty)
    """
    if not text:
        return []

    entries = []
    dropped = 0
    for line in LINE_BREAK.split(text):
        entry = parse_line(line)
        if entry is not None:
            entries.append(entry)
        elif line.strip():
            dropped += 1

    if dropped:
        logger.debug("Dropped %d malformed CSV line(s)", dropped)
    return entries


def decode_upload(data):
    """
    Decode uploaded file contents to text.

    Args:
        data: Bytes from the uploader, or text already decoded

    Returns:
        Decoded text; UTF-8 (with or without BOM), falling back to latin-1
    """
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def entries_from_upload(data):
    """
    Decode and parse an uploaded CSV.

    Raises:
        EmptyImportError: The upload contains no valid rows
    """
    entries = parse_movie_csv(decode_upload(data))
    if not entries:
        raise EmptyImportError()
    return entries
