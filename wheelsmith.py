# Copyright (c) 2020-2021 Blazej Michalik
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
"""API for building, reading, and choosing ".whl" archives.

Use :class:`WheelArchive` to create or read a wheel, and :func:`rank` to pick
the best one out of several candidate wheels for a given runtime.

Managing metadata is done via `metadata`, `wheeldata`, and `record` attributes.
See :class:`MetadataDocument`, :class:`WheelData`, and :class:`WheelRecord` for
documentation of the objects returned by these attributes.

Example
-------
Here's how to create a simple package in memory and save it::

    wa = WheelArchive("mywheel", "1")
    wa.writestr("mywheel.py", b"print('Hello!')")
    wa.write_to_directory('path/to/directory/')

Reading it back verifies the contents against its RECORD::

    wa = WheelArchive.from_file('path/to/directory/mywheel-1-py3-none-any.whl')

Choosing between wheels uses the tags of the running interpreter, unless
a list of supported tags is given::

    best = rank(["pkg-1.0-py3-none-any.whl",
                 "pkg-1.0-cp39-abi3-manylinux_2_17_x86_64.whl"])
"""

import os
import csv
import io
import re
import stat
import zlib
import base64
import hashlib
import logging
import warnings
import zipfile

from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor
from inspect import signature
from itertools import product
from pathlib import Path
from packaging.licenses import canonicalize_license_expression
from packaging.tags import Tag, sys_tags
from packaging.utils import canonicalize_name
from packaging.version import Version, InvalidVersion

from typing import (
    Any, BinaryIO, Callable, Dict, Iterable, Iterator, List, Mapping,
    Optional, Sequence, Tuple, Union,
)

__version__ = '0.1.0'

logger = logging.getLogger(__name__)


DEFAULT_HASH_ALGO = 'sha256'

# Every zip entry gets the same timestamp and mode, so that building the same
# contents twice yields the same bytes.
ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)
ZIP_FILE_MODE = 0o644
_ZIP_UNIX_SYSTEM = 3

SUPPORTED_WHEEL_VERSION = '1.0'
METADATA_VERSION = '2.1'
# License-Expression was introduced in this version of the core metadata
LICENSE_METADATA_VERSION = '2.4'


def _slots_from_params(func):
    """List out slot names based on the names of parameters of func

    Usage: __slots__ = _slots_from_signature(__init__)
    """
    funcsig = signature(func)
    slots = list(funcsig.parameters)
    slots.remove('self')
    return slots


_DRIVE_PREFIX_RE = re.compile(r'^[A-Za-z]:')


def _unsafe_arcpath_reason(arcpath: str) -> Optional[str]:
    """Tell why a path cannot be used inside an archive, or return None."""
    if arcpath == '':
        return "path is empty"
    if arcpath.startswith('/') or _DRIVE_PREFIX_RE.match(arcpath):
        return "path is absolute"
    if '\\' in arcpath:
        return "path is not POSIX-style"
    if '..' in arcpath.split('/'):
        return "path contains a '..' segment"
    return None


# Matches the RECORD of a wheel, along with its signature files, which by
# convention are not listed in the RECORD.
_RECORD_PATH_RE = re.compile(r'^[^/]+\.dist-info/RECORD(\.jws|\.p7s)?$')


def _is_record_path(arcpath: str) -> bool:
    return _RECORD_PATH_RE.match(arcpath) is not None


class WheelParseError(ValueError):
    """Text contents of a wheel could not be parsed.

    Attributes
    ----------
    message
        Description of the problem, without location information.

    lineno
        Number of the offending line, counting from 1, if known.

    path
        Path of the offending file inside the archive, if known.
    """

    def __init__(self, message: str, *, lineno: Optional[int] = None,
                 path: Optional[str] = None):
        self.message = message
        self.lineno = lineno
        self.path = path
        super().__init__(self._located_message())

    def _located_message(self) -> str:
        location = []
        if self.path is not None:
            location.append(self.path)
        if self.lineno is not None:
            location.append(f"line {self.lineno}")
        if not location:
            return self.message
        return f"{', '.join(location)}: {self.message}"

    def with_path(self, path: str) -> 'WheelParseError':
        """Return a copy of this error that names the file it came from."""
        return type(self)(self.message, lineno=self.lineno, path=path)


class MalformedMetadataError(WheelParseError):
    """Metadata text violates the field/continuation line grammar."""


class MalformedRecordRowError(WheelParseError):
    """A row of RECORD has a wrong number of fields or bad contents."""


class InvalidFilenameError(ValueError):
    """The filename does not follow the wheel naming convention."""

    def __init__(self, message: str, filename: str):
        self.filename = filename
        super().__init__(f"{message}: {filename!r}.")


class UnsupportedHashTypeError(ValueError):
    """The given hash name is not allowed in RECORD files."""


class BadWheelFileError(ValueError):
    """The given file cannot be interpreted as a wheel."""


class ArchiveCorruptError(BadWheelFileError):
    """The zip container itself is broken."""


class ProhibitedWriteError(ValueError):
    """Writing into given arcname would result in a corrupted package."""


class MissingFile(namedtuple('MissingFile', 'path')):
    """A file listed in RECORD is absent from the archive."""
    __slots__ = ()

    def __str__(self) -> str:
        return f"{self.path}: listed in RECORD, but missing from the archive"


class UnlistedFile(namedtuple('UnlistedFile', 'path')):
    """A file in the archive is absent from RECORD."""
    __slots__ = ()

    def __str__(self) -> str:
        return f"{self.path}: present in the archive, but not listed in RECORD"


class DigestMismatch(namedtuple('DigestMismatch', 'path expected actual')):
    """Hash of a file differs from the one in RECORD.

    Both `expected` and `actual` are in the ``<algorithm>=<digest>`` form.
    """
    __slots__ = ()

    def __str__(self) -> str:
        return (f"{self.path}: hash {self.actual} does not match "
                f"{self.expected} from RECORD")


class SizeMismatch(namedtuple('SizeMismatch', 'path expected actual')):
    """Size of a file differs from the one in RECORD."""
    __slots__ = ()

    def __str__(self) -> str:
        return (f"{self.path}: size {self.actual} does not match "
                f"{self.expected} from RECORD")


Discrepancy = Union[MissingFile, UnlistedFile, DigestMismatch, SizeMismatch]

_DISCREPANCY_ORDER = {
    MissingFile: 0, SizeMismatch: 1, DigestMismatch: 2, UnlistedFile: 3,
}


def _discrepancy_sort_key(discrepancy: Discrepancy) -> Tuple[str, int]:
    return discrepancy.path, _DISCREPANCY_ORDER[type(discrepancy)]


class IntegrityError(ValueError):
    """Contents of an archive do not match its RECORD.

    Raised only after the whole archive has been checked, so that every
    problem is reported at once.

    Attributes
    ----------
    discrepancies
        List of :class:`MissingFile`, :class:`UnlistedFile`,
        :class:`DigestMismatch`, and :class:`SizeMismatch` objects, sorted by
        path.

    archive
        The :class:`WheelArchive` object that failed verification, if any. It
        is fully read, so it may still be used by callers that decide to
        tolerate the damage.
    """

    def __init__(self, discrepancies: Iterable[Discrepancy],
                 archive: Optional['WheelArchive'] = None):
        self.discrepancies = sorted(discrepancies, key=_discrepancy_sort_key)
        self.archive = archive
        details = '\n'.join(f"  {d}" for d in self.discrepancies)
        super().__init__(
            f"RECORD does not match the archive contents "
            f"({len(self.discrepancies)} problem(s) found):\n{details}"
        )


# Metadata documents
# ==================

_FIELD_NAME_RE = re.compile(r'^[^\s:]+$')
_FOLD_INDENT = ' ' * 8


def _parse_fields(
    lines: Iterable[Tuple[int, str]],
    separator: str,
    name_re: 're.Pattern',
) -> List[Tuple[str, str]]:
    """Parse numbered lines of "name<separator>value" pairs.

    Lines starting with whitespace continue the value of the previous field;
    their stripped contents are joined to it with a single space.

    Lines must be given without their line terminators, and must not be blank.
    """
    fields: List[Tuple[str, str]] = []
    for lineno, line in lines:
        assert line, "Blank lines must not reach the field parser."

        if line[0] in ' \t':
            if not fields:
                raise MalformedMetadataError(
                    "Continuation line without a preceding field.",
                    lineno=lineno
                )
            content = line.strip()
            if content:
                name, value = fields[-1]
                fields[-1] = (name, f"{value} {content}" if value else content)
            continue

        name, sep, value = line.partition(separator)
        if not sep:
            raise MalformedMetadataError(
                f"Expected 'name{separator} value', got {line!r}.",
                lineno=lineno
            )
        name = name.rstrip()
        if not name_re.match(name):
            raise MalformedMetadataError(
                f"Invalid field name: {name!r}.", lineno=lineno
            )
        fields.append((name, value.strip()))
    return fields


class MetadataDocument:
    """Implements the text format of METADATA and WHEEL files.

    A document is an ordered list of ``(name, value)`` fields, optionally
    followed by a free-text body, separated from the fields by a blank line::

        Metadata-Version: 2.1
        Name: my-package
        Classifier: Framework :: Pytest
        Classifier: Topic :: Software Development :: Testing

        This is the body.

    Field names are matched case-insensitively, but kept as they were given.
    The same name may appear multiple times; the order of fields is always
    preserved.

    A line starting with whitespace continues the value of the previous
    field. When parsing, its contents are joined to that value with a single
    space. When serializing, values containing newlines are folded this way,
    with empty lines dropped. Long lines are never wrapped.

    Parameters
    ----------
    fields
        Initial ``(name, value)`` pairs.

    body
        Text after the blank line that ends the fields. ``None`` means there
        is no body and no blank line, which is not the same as an empty body.
    """
    def __init__(self, fields: Optional[Iterable[Tuple[str, str]]] = None,
                 body: Optional[str] = None):
        self.fields: List[Tuple[str, str]] = []
        for name, value in fields or ():
            self.add(name, value)
        self.body = body

    __slots__ = _slots_from_params(__init__)

    @staticmethod
    def _check_field(name: str, value: str):
        if not isinstance(name, str) or not _FIELD_NAME_RE.match(name):
            raise ValueError(f"Invalid field name: {name!r}.")
        if not isinstance(value, str):
            raise TypeError(
                f"Value of {name!r} must be a string, got {type(value)} "
                f"instead."
            )

    def get_all(self, name: str) -> List[str]:
        """Return values of all fields named `name`, in document order."""
        key = name.lower()
        return [v for n, v in self.fields if n.lower() == key]

    def get_first(self, name: str,
                  default: Optional[str] = None) -> Optional[str]:
        """Return value of the first field named `name`, or `default`."""
        key = name.lower()
        for n, v in self.fields:
            if n.lower() == key:
                return v
        return default

    def add(self, name: str, value: str) -> None:
        """Append a field, even if one with the same name already exists."""
        self._check_field(name, value)
        self.fields.append((name, value))

    def set(self, name: str, value: str) -> None:
        """Replace all fields named `name` with a single one.

        The new field takes the place of the first field it replaces, or is
        appended at the end if there were none.
        """
        self._check_field(name, value)
        key = name.lower()
        fields = []
        placed = False
        for n, v in self.fields:
            if n.lower() != key:
                fields.append((n, v))
            elif not placed:
                fields.append((name, value))
                placed = True
        if not placed:
            fields.append((name, value))
        self.fields = fields

    def remove(self, name: str) -> int:
        """Remove all fields named `name`. Returns the number removed."""
        key = name.lower()
        kept = [(n, v) for n, v in self.fields if n.lower() != key]
        removed = len(self.fields) - len(kept)
        self.fields = kept
        return removed

    def names(self) -> List[str]:
        """Return distinct field names, in the order of first appearance."""
        seen = set()
        names = []
        for n, _ in self.fields:
            if n.lower() not in seen:
                seen.add(n.lower())
                names.append(n)
        return names

    def __contains__(self, name) -> bool:
        return self.get_first(name) is not None

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __eq__(self, other):
        if isinstance(other, MetadataDocument):
            return self.fields == other.fields and self.body == other.body
        else:
            return NotImplemented

    def __repr__(self) -> str:
        return f"MetadataDocument({self.fields!r}, body={self.body!r})"

    @staticmethod
    def _fold(value: str) -> List[str]:
        parts = [part.strip() for part in value.split('\n')]
        return [part for part in parts if part] or ['']

    def __str__(self) -> str:
        lines = []
        for name, value in self.fields:
            first, *rest = self._fold(value)
            lines.append(f"{name}: {first}" if first else f"{name}:")
            lines.extend(_FOLD_INDENT + part for part in rest)
        text = ''.join(line + '\n' for line in lines)
        if self.body is not None:
            text += '\n' + self.body
        return text

    @classmethod
    def from_str(cls, s: str) -> 'MetadataDocument':
        """Parse a document.

        Raises
        ------
        MalformedMetadataError
            If a field line has no colon or an invalid name, or when a
            continuation line has no field to continue.
        """
        lines = s.split('\n')
        body = None
        field_lines = []
        for idx, raw_line in enumerate(lines):
            line = raw_line[:-1] if raw_line.endswith('\r') else raw_line
            if line == '':
                # An empty last element is just what follows the final newline
                if idx < len(lines) - 1:
                    body = '\n'.join(lines[idx + 1:])
                break
            field_lines.append((idx + 1, line))

        return cls(_parse_fields(field_lines, ':', _FIELD_NAME_RE), body)


# Entry point names may contain anything except '=', but cannot start with
# '[' nor start or end with whitespace.
_ENTRY_POINT_NAME_RE = re.compile(r'^[^\s=\[](?:[^=]*[^\s=])?$')


class EntryPoints:
    """Implements the .dist-info/entry_points.txt file format.

    Entry points are grouped into INI-style sections, each holding
    ``name = value`` lines::

        [console_scripts]
        my-tool = my_package.cli:main

    Lines inside a group follow the same grammar as fields of
    :class:`MetadataDocument`, with ``=`` used instead of ``:``. Lines starting
    with ``#`` or ``;`` are comments. Order of groups and entries is
    preserved.
    """
    def __init__(self):
        self._groups: Dict[str, List[Tuple[str, str]]] = {}

    def add(self, group: str, name: str, value: str) -> None:
        if not group or group != group.strip() or ']' in group:
            raise ValueError(f"Invalid entry point group: {group!r}.")
        if not _ENTRY_POINT_NAME_RE.match(name):
            raise ValueError(f"Invalid entry point name: {name!r}.")
        if '\n' in value:
            raise ValueError(f"Entry point value spans lines: {value!r}.")
        self._groups.setdefault(group, []).append((name, value.strip()))

    def groups(self) -> List[str]:
        return list(self._groups)

    def get(self, group: str) -> List[Tuple[str, str]]:
        """Return ``(name, value)`` pairs of the given group."""
        return list(self._groups.get(group, []))

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._groups.values())

    def __eq__(self, other):
        if isinstance(other, EntryPoints):
            return self._groups == other._groups
        else:
            return NotImplemented

    def __str__(self) -> str:
        sections = []
        for group, entries in self._groups.items():
            lines = [f"[{group}]"]
            lines.extend(f"{name} = {value}" for name, value in entries)
            sections.append('\n'.join(lines) + '\n')
        return '\n'.join(sections)

    @classmethod
    def from_str(cls, s: str) -> 'EntryPoints':
        sections: List[Tuple[str, List[Tuple[int, str]]]] = []
        for lineno, raw_line in enumerate(s.split('\n'), start=1):
            line = raw_line.rstrip('\r')
            stripped = line.strip()
            if not stripped or stripped[0] in '#;':
                continue
            if line.startswith('['):
                if not stripped.endswith(']') or not stripped[1:-1].strip():
                    raise MalformedMetadataError(
                        f"Invalid group header: {line!r}.", lineno=lineno
                    )
                sections.append((stripped[1:-1].strip(), []))
                continue
            if not sections:
                raise MalformedMetadataError(
                    "Entry point outside of a [group] section.", lineno=lineno
                )
            sections[-1][1].append((lineno, line))

        entry_points = cls()
        for group, lines in sections:
            fields = _parse_fields(lines, '=', _ENTRY_POINT_NAME_RE)
            entry_points._groups.setdefault(group, []).extend(fields)
        return entry_points


# RECORD
# ======

_DIGEST_NAME_RE = re.compile(r'^[A-Za-z0-9_]+\Z')

class Digester(namedtuple('Digester', 'name func')):
    """A digest function paired with the algorithm name used in RECORD.

    `func` must be a pure function that takes bytes and returns the raw
    digest bytes. `name` is written into RECORD in front of the encoded
    digest, e.g. ``sha256=...``.

    Use :func:`digester_for` to get one backed by :mod:`hashlib`.

    Raises
    ------
    UnsupportedHashTypeError
        If `name` is empty or contains characters other than ASCII letters,
        digits, and underscores. Such names would not survive a round trip
        through a RECORD hash field.
    """
    __slots__ = ()

    def __new__(cls, name: str, func: Callable[[bytes], bytes]):
        if not isinstance(name, str) or not _DIGEST_NAME_RE.match(name):
            raise UnsupportedHashTypeError(
                f"{repr(name)} cannot be used as a record hash name."
            )
        return super().__new__(cls, name, func)

    def hash_entry(self, data: bytes) -> str:
        return f"{self.name}={_hash_encoder(self.func(data))}"


def _hash_encoder(data: bytes) -> str:
    """
    Encode a file hash per PEP 376 spec

    From the spec:
    The hash is either the empty string or the hash algorithm as named in
    hashlib.algorithms_guaranteed, followed by the equals character =,
    followed by the urlsafe-base64-nopad encoding of the digest
    (base64.urlsafe_b64encode(digest) with trailing = removed).
    """
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode('ascii')


def digester_for(hash_algo: str) -> Digester:
    """Return a :class:`Digester` for a hash algorithm from :mod:`hashlib`.

    Raises
    ------
    UnsupportedHashTypeError
        If the algorithm cannot be used in RECORD files.
    """
    # per PEP-376
    if hash_algo not in hashlib.algorithms_guaranteed:
        raise UnsupportedHashTypeError(
            f"{repr(hash_algo)} is not a valid record hash."
        )
    # per PEP 427
    if hash_algo in ('md5', 'sha1'):
        raise UnsupportedHashTypeError(
            f"{repr(hash_algo)} is a forbidden hash type."
        )
    # SHAKE digests have no fixed length
    if hash_algo.startswith('shake_'):
        raise UnsupportedHashTypeError(
            f"{repr(hash_algo)} is a variable-length hash."
        )

    def digest(data: bytes) -> bytes:
        return hashlib.new(hash_algo, data).digest()

    return Digester(hash_algo, digest)


def _as_digester(hash_algo: Union[str, Digester]) -> Digester:
    if isinstance(hash_algo, Digester):
        return hash_algo
    if isinstance(hash_algo, str):
        return digester_for(hash_algo)
    raise TypeError(
        f"Expected a hash name or a Digester, got {type(hash_algo)} instead."
    )


def _compute_digests(
    jobs: Sequence[Tuple[Callable[[bytes], bytes], bytes]],
    workers: Optional[int] = None,
) -> List[bytes]:
    """Run each ``(func, data)`` job, returning digests in the jobs' order."""
    if not workers or workers < 2 or len(jobs) < 2:
        return [func(data) for func, data in jobs]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda job: job[0](job[1]), jobs))


class RecordEntry(namedtuple('RecordEntry', 'path algorithm digest size')):
    """A single row of RECORD.

    `algorithm` and `digest` are empty strings for entries without a hash,
    i.e. for RECORD itself and for directories. `size` is None if the size
    field is empty.
    """
    __slots__ = ()

    @property
    def hash(self) -> str:
        return f"{self.algorithm}={self.digest}" if self.algorithm else ''

    @property
    def is_directory(self) -> bool:
        return self.path.endswith('/')


_SIZE_RE = re.compile(r'^[0-9]+$')


# TODO: leave out hashes of *.pyc files?
class WheelRecord:
    """Contains logic for creation, parsing, and checking of RECORD files.

    Keeps track of files in the wheel and their hashes. Entries are kept in
    the order they were added or read in.

    For the full spec, see PEP-376 "RECORD" section, PEP-627,
    "The .dist-info directory" section of PEP-427, and
    https://packaging.python.org/specifications/recording-installed-packages/.

    Parameters
    ----------
    hash_algo
        Hash algorithm used for new entries. Either a name of one of the
        algorithms from :mod:`hashlib` or a :class:`Digester`.
    """

    def __init__(self, hash_algo: Union[str, Digester] = DEFAULT_HASH_ALGO):
        self._records: Dict[str, RecordEntry] = {}
        self._digester = _as_digester(hash_algo)

    @property
    def hash_algo(self) -> str:
        """Hash algorithm to use to generate RECORD file entries"""
        return self._digester.name

    @hash_algo.setter
    def hash_algo(self, value: Union[str, Digester]):
        self._digester = _as_digester(value)

    @property
    def digester(self) -> Digester:
        return self._digester

    def hash_of(self, arcpath: str) -> str:
        """Return the hash of a file in the archive this RECORD describes


        Parameters
        ----------
        arcpath
            Location of the file inside the archive.

        Returns
        -------
        str
            String in the form <algorithm>=<base64_str>, where algorithm is the
            name of the hashing agorithm used to generate the hash (see
            hash_algo), and base64_str is a string containing a base64 encoded
            version of the hash with any trailing '=' removed.
        """
        return self._records[arcpath].hash

    def __str__(self) -> str:
        buf = io.StringIO()
        records = csv.writer(buf, lineterminator='\n')
        for entry in self._records.values():
            size = '' if entry.size is None else str(entry.size)
            records.writerow([entry.path, entry.hash, size])
        return buf.getvalue()

    @classmethod
    def from_str(cls, s: str,
                 hash_algo: Union[str, Digester] = DEFAULT_HASH_ALGO
                 ) -> 'WheelRecord':
        """Parse the contents of a RECORD file.

        Raises
        ------
        MalformedRecordRowError
            If a row does not have exactly three fields, is badly quoted,
            repeats a path, uses an unsafe path, or has a malformed hash or
            size field.
        """
        record = cls(hash_algo)
        reader = csv.reader(io.StringIO(s, newline=''), strict=True)
        while True:
            try:
                row = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                raise MalformedRecordRowError(
                    f"Badly quoted row: {e}.", lineno=reader.line_num
                ) from e
            if not row:
                continue
            entry = cls._parse_row(row, reader.line_num)
            if entry.path in record:
                raise MalformedRecordRowError(
                    f"Duplicate entry for {entry.path!r}.",
                    lineno=reader.line_num
                )
            record.add_entry(entry)
        return record

    @staticmethod
    def _parse_row(row: List[str], lineno: int) -> RecordEntry:
        if len(row) != 3:
            raise MalformedRecordRowError(
                f"Expected 3 fields, got {len(row)}: {row!r}.", lineno=lineno
            )
        path, hash_field, size_field = row

        reason = _unsafe_arcpath_reason(path)
        if reason is not None:
            raise MalformedRecordRowError(
                f"Invalid path {path!r}: {reason}.", lineno=lineno
            )

        algorithm, digest = '', ''
        if hash_field:
            algorithm, sep, digest = hash_field.partition('=')
            if not (sep and algorithm and digest):
                raise MalformedRecordRowError(
                    f"Hash of {path!r} is not in the <algorithm>=<digest> "
                    f"form: {hash_field!r}.", lineno=lineno
                )

        size = None
        if size_field:
            if not _SIZE_RE.match(size_field):
                raise MalformedRecordRowError(
                    f"Size of {path!r} is not a decimal number: "
                    f"{size_field!r}.", lineno=lineno
                )
            size = int(size_field)

        return RecordEntry(path, algorithm, digest, size)

    @classmethod
    def build(cls, files: Mapping[str, bytes],
              hash_algo: Union[str, Digester] = DEFAULT_HASH_ALGO,
              *, workers: Optional[int] = None) -> 'WheelRecord':
        """Create a record describing given files.

        Entries are sorted by path, regardless of the order of `files` and of
        the order in which digests get computed.

        Parameters
        ----------
        files
            Mapping of archive paths to file contents.

        hash_algo
            Name of a :mod:`hashlib` algorithm or a :class:`Digester`.

        workers
            Keyword only. If greater than 1, digests are computed using a
            thread pool of this size.
        """
        record = cls(hash_algo)
        paths = sorted(files)
        for path in paths:
            record._check_new_path(path)

        func = record.digester.func
        digests = _compute_digests(
            [(func, files[path]) for path in paths], workers
        )
        for path, digest in zip(paths, digests):
            record._records[path] = RecordEntry(
                path, record.hash_algo, _hash_encoder(digest), len(files[path])
            )
        return record

    def _check_new_path(self, arcpath: str):
        assert not _is_record_path(arcpath), (
            f"Attempt to add an entry for a RECORD file to the RECORD: "
            f"{repr(arcpath)}."
        )
        reason = _unsafe_arcpath_reason(arcpath)
        if reason is not None:
            raise ProhibitedWriteError(
                f"Cannot add a RECORD entry for {arcpath!r}: {reason}."
            )

    def update(self, arcpath: str, data: bytes):
        """Add or replace a record entry for a file in the archive.

        Directory paths, i.e. the ones ending with a slash, get an entry with
        no hash and no size.

        Parameters
        ----------
        arcpath
            Path in the archive of the file that the entry describes.

        data
            Contents of the file.
        """
        self._check_new_path(arcpath)
        if arcpath.endswith('/'):
            self._records[arcpath] = RecordEntry(arcpath, '', '', None)
            return

        digest = _hash_encoder(self._digester.func(data))
        self._records[arcpath] = RecordEntry(
            arcpath, self.hash_algo, digest, len(data)
        )

    def add_entry(self, entry: RecordEntry):
        """Add an already computed entry.

        Raises
        ------
        MalformedRecordRowError
            If there is an entry for the same path already.
        """
        if entry.path in self._records:
            raise MalformedRecordRowError(
                f"Duplicate entry for {entry.path!r}."
            )
        self._records[entry.path] = entry

    def remove(self, arcpath: str):
        del self._records[arcpath]

    def paths(self) -> List[str]:
        return list(self._records)

    def verify(self, contents: Mapping[str, bytes], *,
               digester: Optional[Digester] = None,
               workers: Optional[int] = None) -> List[Discrepancy]:
        """Check archive contents against this record.

        Nothing is fixed; each problem found is reported. The RECORD file
        itself, its signatures, and directory entries are not checked. Entries
        without a hash are only checked for presence and size.

        Parameters
        ----------
        contents
            Mapping of archive paths to file contents.

        digester
            Keyword only. Used for entries that name its algorithm. Other
            entries use :func:`digester_for`.

        workers
            Keyword only. If greater than 1, digests are computed using a
            thread pool of this size.

        Returns
        -------
        list
            Discrepancies found, sorted by path.

        Raises
        ------
        UnsupportedHashTypeError
            If an entry uses an algorithm that cannot be used for RECORD.
        """
        discrepancies: List[Discrepancy] = []
        digesters: Dict[str, Digester] = {}
        to_hash = []
        for entry in self._records.values():
            if _is_record_path(entry.path) or entry.is_directory:
                continue
            data = contents.get(entry.path)
            if data is None:
                discrepancies.append(MissingFile(entry.path))
                continue
            if entry.size is not None and entry.size != len(data):
                discrepancies.append(
                    SizeMismatch(entry.path, entry.size, len(data))
                )
            if entry.algorithm:
                if entry.algorithm not in digesters:
                    digesters[entry.algorithm] = (
                        digester
                        if digester is not None
                        and digester.name == entry.algorithm
                        else digester_for(entry.algorithm)
                    )
                to_hash.append((entry, data))

        digests = _compute_digests(
            [(digesters[e.algorithm].func, data) for e, data in to_hash],
            workers
        )
        for (entry, _), digest in zip(to_hash, digests):
            actual = _hash_encoder(digest)
            if actual != entry.digest:
                discrepancies.append(DigestMismatch(
                    entry.path, entry.hash, f"{entry.algorithm}={actual}"
                ))

        for path in contents:
            if (path not in self._records
                    and not _is_record_path(path)
                    and not path.endswith('/')):
                discrepancies.append(UnlistedFile(path))

        discrepancies.sort(key=_discrepancy_sort_key)
        return discrepancies

    def __eq__(self, other):
        if isinstance(other, WheelRecord):
            return str(self) == str(other)
        else:
            return NotImplemented

    def __contains__(self, path):
        return path in self._records

    def __iter__(self) -> Iterator[RecordEntry]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)


# Filenames & compatibility tags
# ==============================

_TAG_CHARS_RE = re.compile(r'[^A-Za-z0-9.]')
_BUILD_TAG_RE = re.compile(r'^([0-9]+)([A-Za-z0-9_]*)\Z')


def normalize_tag(tag: str) -> str:
    """Lowercase the tag and replace anything besides ``[A-Za-z0-9.]`` with
    underscores.
    """
    return _TAG_CHARS_RE.sub('_', tag).lower()


def _split_compressed(field: str) -> Tuple[str, ...]:
    """Split a compressed tag field, e.g. ``py2.py3`` into its tags."""
    tags: List[str] = []
    for tag in normalize_tag(field).split('.'):
        if tag == '':
            raise ValueError(f"Empty tag in a compressed tag set: {field!r}.")
        if tag not in tags:
            tags.append(tag)
    return tuple(tags)


def _split_tag_triple(tag: str) -> Tuple[Tuple[str, ...], ...]:
    fields = tag.split('-')
    if len(fields) != 3:
        raise ValueError(
            f"Tags must consist of 3 dash-separated fields: {tag!r}."
        )
    return tuple(_split_compressed(f) for f in fields)


class BuildTag(namedtuple('BuildTag', 'number suffix')):
    """Optional build tag of a wheel, e.g. ``1`` or ``2_nightly``.

    Used as a tie breaker between wheels of the same version. Build tags
    compare by their numeric prefix first, then lexicographically by the
    suffix. The suffix may only contain ASCII letters, digits, and
    underscores, so that the tag stays a single filename field.
    """
    __slots__ = ()

    @classmethod
    def from_str(cls, s: str) -> 'BuildTag':
        match = _BUILD_TAG_RE.match(s)
        if match is None:
            raise ValueError(
                f"Build tag must start with a digit and contain only "
                f"letters, digits, and underscores: {s!r}."
            )
        return cls(int(match.group(1)), match.group(2))

    def __str__(self) -> str:
        return f"{self.number}{self.suffix}"


def _to_build_tag(build: Union[BuildTag, int, str, None]) -> Optional[BuildTag]:
    if build is None:
        return build
    if isinstance(build, BuildTag):
        return BuildTag.from_str(str(build))
    if isinstance(build, bool) or not isinstance(build, (int, str)):
        raise TypeError(
            f"Build tag must be an int or a string, got {type(build)} instead."
        )
    if isinstance(build, int) and build < 0:
        raise ValueError(f"Build number cannot be negative: {build}.")
    return BuildTag.from_str(str(build))


def _build_key(build: Optional[BuildTag]) -> tuple:
    # Wheels without a build tag lose to the ones that have it
    return () if build is None else tuple(build)


_VERSION_RUN_RE = re.compile(r'[0-9]+|[^0-9]+')


def version_key(version: Union[str, Version]) -> tuple:
    """Return a sort key that totally orders version strings.

    PEP-440 versions are ordered using :class:`packaging.version.Version` and
    come after all the others. Other strings are compared segment by segment
    (segments are separated with dots), where each segment is split into
    numeric parts, compared as numbers, and the rest, compared as lowercase
    strings.
    """
    if isinstance(version, Version):
        return (1, version)
    try:
        return (1, Version(version))
    except InvalidVersion:
        segments = tuple(
            tuple((1, int(run)) if run.isdigit() else (0, run.lower())
                  for run in _VERSION_RUN_RE.findall(segment))
            for segment in version.split('.')
        )
        return (0, segments)


class WheelFilename(namedtuple('WheelFilename', [
        'distribution', 'version', 'build_tag', 'interpreter_tags',
        'abi_tags', 'platform_tags', 'extension'])):
    """Parsed name of a wheel file.

    Follows the ``{distribution}-{version}(-{build})?-{interpreter}-{abi}-
    {platform}.{extension}`` convention from PEP-427. Each of the tag fields
    may be a compressed tag set, i.e. a list of tags joined by dots. Tags are
    normalized (see :func:`normalize_tag`), distribution and version are kept
    verbatim.

    Use :func:`parse_filename` to create objects of this class from strings.
    """
    __slots__ = ()

    @classmethod
    def from_str(cls, filename: str) -> 'WheelFilename':
        return parse_filename(filename)

    def __str__(self) -> str:
        segments = [self.distribution, self.version]
        if self.build_tag is not None:
            segments.append(str(self.build_tag))
        segments.extend([
            '.'.join(self.interpreter_tags),
            '.'.join(self.abi_tags),
            '.'.join(self.platform_tags),
        ])
        return '-'.join(segments) + '.' + self.extension

    @property
    def normalized_name(self) -> str:
        """Distribution name in the form used by the filename convention."""
        return canonicalize_name(self.distribution).replace('-', '_')

    @property
    def tags(self) -> Tuple[Tag, ...]:
        return expand_tags(self)

    def sort_key(self) -> tuple:
        """Key ordering wheels by name, then version, then build tag."""
        return (self.normalized_name, version_key(self.version),
                _build_key(self.build_tag))


def parse_filename(filename: Union[str, 'os.PathLike[str]']) -> WheelFilename:
    """Parse a wheel filename.

    If a path is given, only its last component is parsed.

    Raises
    ------
    InvalidFilenameError
        If the name has no extension, does not have 5 or 6 dash-separated
        fields, has an empty field, or has a build tag that does not start
        with a digit.
    """
    name = os.fspath(filename).rsplit('/', 1)[-1]

    stem, dot, extension = name.rpartition('.')
    if not (dot and stem and extension) or '-' in extension:
        raise InvalidFilenameError("Filename has no archive extension", name)

    fields = stem.split('-')
    if len(fields) not in (5, 6):
        raise InvalidFilenameError(
            f"Expected 5 or 6 dash-separated fields, got {len(fields)}", name
        )
    if '' in fields:
        raise InvalidFilenameError("Filename has an empty field", name)

    build_tag = None
    if len(fields) == 6:
        try:
            build_tag = BuildTag.from_str(fields[2])
        except ValueError as e:
            raise InvalidFilenameError(
                f"Invalid build tag {fields[2]!r}", name
            ) from e

    try:
        interpreters, abis, platforms = (
            _split_compressed(field) for field in fields[-3:]
        )
    except ValueError as e:
        raise InvalidFilenameError(str(e).rstrip('.'), name) from e

    return WheelFilename(fields[0], fields[1], build_tag,
                         interpreters, abis, platforms, extension)


def expand_tags(tags: Union[str, WheelFilename]) -> Tuple[Tag, ...]:
    """Expand compressed tag sets into individual tags.

    Each of the interpreter, ABI, and platform fields is split on dots, and
    the result is their cross product: ``py2.py3-none-any`` expands to
    ``py2-none-any`` and ``py3-none-any``.

    The returned tags are ordered by interpreter tag first, then by ABI tag,
    then by platform tag, each following the order in which they were given.

    Parameters
    ----------
    tags
        Either a :class:`WheelFilename` or a string in the
        ``{interpreter}-{abi}-{platform}`` form.

    Raises
    ------
    ValueError
        If a string does not have 3 fields or contains an empty tag.
    """
    if isinstance(tags, WheelFilename):
        fields = (tags.interpreter_tags, tags.abi_tags, tags.platform_tags)
    else:
        fields = _split_tag_triple(tags)
    return tuple(Tag(i, a, p) for i, a, p in product(*fields))


TIE_BREAK_BUILD = 'build'
TIE_BREAK_SPECIFICITY = 'specificity'
DEFAULT_TIE_BREAK = (TIE_BREAK_BUILD, TIE_BREAK_SPECIFICITY)


def _prefer_highest_build(tied: List[WheelFilename]) -> List[WheelFilename]:
    best = max(_build_key(c.build_tag) for c in tied)
    return [c for c in tied if _build_key(c.build_tag) == best]


def _prefer_most_specific(tied: List[WheelFilename]) -> List[WheelFilename]:
    tag_sets = [frozenset(c.tags) for c in tied]
    return [c for c, tags in zip(tied, tag_sets)
            if not any(other < tags for other in tag_sets)]


_TIE_BREAKERS = {
    TIE_BREAK_BUILD: _prefer_highest_build,
    TIE_BREAK_SPECIFICITY: _prefer_most_specific,
}


def _as_filename(candidate: Union[str, WheelFilename]) -> WheelFilename:
    if isinstance(candidate, WheelFilename):
        return candidate
    return parse_filename(candidate)


def _tag_priorities(
    supported: Optional[Iterable[Union[str, Tag]]]
) -> Dict[Tag, int]:
    """Map each supported tag onto its position in the list of supported tags.

    Strings are expanded; all tags of a compressed set share its position.
    """
    if supported is None:
        supported = sys_tags()
    priorities: Dict[Tag, int] = {}
    for idx, item in enumerate(supported):
        for tag in (expand_tags(item) if isinstance(item, str) else (item,)):
            priorities.setdefault(tag, idx)
    return priorities


def _score(candidate: WheelFilename,
           priorities: Dict[Tag, int]) -> Optional[int]:
    scores = [priorities[tag] for tag in candidate.tags if tag in priorities]
    return min(scores) if scores else None


def compatible(
    candidates: Iterable[Union[str, WheelFilename]],
    supported: Optional[Iterable[Union[str, Tag]]] = None,
) -> List[WheelFilename]:
    """Return the candidates installable on a runtime, best matches first.

    Candidates are ordered by the earliest position at which any of their
    tags appears in `supported`. Candidates with the same position keep their
    relative order. See :func:`rank` for the description of parameters.
    """
    priorities = _tag_priorities(supported)
    scored = []
    for idx, candidate in enumerate(_as_filename(c) for c in candidates):
        score = _score(candidate, priorities)
        if score is not None:
            scored.append((score, idx, candidate))
    return [candidate for _, _, candidate in sorted(scored)]


def rank(
    candidates: Iterable[Union[str, WheelFilename]],
    supported: Optional[Iterable[Union[str, Tag]]] = None,
    *,
    tie_break: Sequence[str] = DEFAULT_TIE_BREAK,
) -> Optional[WheelFilename]:
    """Pick the wheel that is the best match for a runtime.

    For each candidate, the earliest position in `supported` at which any of
    its tags appears is found. Candidates with no tag in `supported` are not
    eligible. The candidate with the earliest position wins.

    Ties are broken by the policies listed in `tie_break`, applied in order,
    each one narrowing down the set of tied candidates:

    - ``"build"`` keeps the candidates with the highest build tag. Wheels
      without a build tag lose to the ones with it.
    - ``"specificity"`` drops the candidates whose tag set is a strict
      superset of a tag set of another tied candidate.

    If there is still more than one candidate left, the one given first wins.

    Parameters
    ----------
    candidates
        Filenames to choose from, either as strings or :class:`WheelFilename`
        objects.

    supported
        Tags supported by the runtime, from the most to the least preferred.
        Items can be :class:`packaging.tags.Tag` objects or strings; strings
        may use compressed tag sets. By default, tags of the running
        interpreter are used (see :func:`packaging.tags.sys_tags`).

    tie_break
        Keyword only. Names of tie breaking policies to apply.

    Returns
    -------
    Optional[WheelFilename]
        The best candidate, or None if none of them is compatible.

    Raises
    ------
    InvalidFilenameError
        If a string candidate is not a valid wheel filename.

    ValueError
        If an unknown tie breaking policy is given.
    """
    unknown = [policy for policy in tie_break if policy not in _TIE_BREAKERS]
    if unknown:
        raise ValueError(f"Unknown tie breaking policies: {unknown!r}.")

    priorities = _tag_priorities(supported)
    best_score: Optional[int] = None
    tied: List[WheelFilename] = []
    for candidate in (_as_filename(c) for c in candidates):
        score = _score(candidate, priorities)
        if score is None:
            continue
        if best_score is None or score < best_score:
            best_score, tied = score, [candidate]
        elif score == best_score:
            tied.append(candidate)

    if not tied:
        logger.debug("None of the candidates is compatible.")
        return None

    for policy in tie_break:
        if len(tied) < 2:
            break
        tied = _TIE_BREAKERS[policy](tied)

    logger.debug("Picked %s, matching supported tag #%d.", tied[0], best_score)
    return tied[0]


# Wheel archives
# ==============

def _check_wheel_version(wheel_version: Optional[str]):
    if wheel_version is None:
        raise BadWheelFileError("WHEEL does not contain Wheel-Version.")
    try:
        major, minor = (int(part) for part in wheel_version.split('.'))
    except ValueError as e:
        raise BadWheelFileError(
            f"Invalid Wheel-Version: {wheel_version!r}."
        ) from e

    supported_major, supported_minor = (
        int(part) for part in SUPPORTED_WHEEL_VERSION.split('.')
    )
    if major != supported_major:
        raise BadWheelFileError(
            f"Unsupported Wheel-Version: {wheel_version!r}."
        )
    if minor > supported_minor:
        warnings.warn(RuntimeWarning(
            f"Wheel-Version {wheel_version} is newer than "
            f"{SUPPORTED_WHEEL_VERSION}, which is the latest supported one."
        ))


# TODO: values validation
class WheelData:
    """Implements .dist-info/WHEEL file format.

    Descriptions of parameters based on PEP-427. All parameters are keyword
    only. Attributes of objects of this class follow parameter names.

    Note
    ----
    Wheel-Version, the wheel format version specifier, is unchangeable. Version
    "1.0" is used.

    Parameters
    ----------
    generator
        Name and (optionally) version of the generator that generated the wheel
        file. By default, "wheelsmith {__version__}" is used.

    root_is_purelib
        Defines whether the root of the wheel file should be first unpacked into
        purelib directory (True) or into platlib directory (False).

    tags
        See PEP-425 - "Compatibility Tags for Built Distributions". Either a
        single string denoting one tag or a list of tags. Tags may contain
        compressed tag sets, in which case they will be expanded.

        By default, "py3-none-any" is used.

    build
        Optional build tag. Used as a tie breaker when two wheels have the
        same version. Can be given as an int, a string, or a
        :class:`BuildTag`; it is always stored as the latter.
    """
    def __init__(self, *,
                 generator: str = 'wheelsmith ' + __version__,
                 root_is_purelib: bool = True,
                 tags: Union[List[str], str] = 'py3-none-any',
                 build: Union[BuildTag, int, str, None] = None):
        # self.wheel_version = '1.0' by property
        self.generator = generator
        self.root_is_purelib = root_is_purelib
        self.tags = self._extend_tags(
            tags if isinstance(tags, list) else [tags]
        )
        self.build = _to_build_tag(build)
    __slots__ = _slots_from_params(__init__)

    @property
    def wheel_version(self) -> str:
        return SUPPORTED_WHEEL_VERSION

    def _extend_tags(self, tags: List[str]) -> List[str]:
        extended_tags: List[str] = []
        for tag in tags:
            for t in expand_tags(tag):
                if str(t) not in extended_tags:
                    extended_tags.append(str(t))
        return extended_tags

    def to_document(self) -> MetadataDocument:
        # TODO Custom exception? Exception message?
        assert isinstance(self.generator, str), (
            f"'generator' must be a string, got {type(self.generator)} instead"
        )
        assert isinstance(self.root_is_purelib, bool), (
            f"'root_is_purelib' must be a boolean, got"
            f"{type(self.root_is_purelib)} instead"
        )
        assert isinstance(self.tags, list), (
            f"Expected a list in 'tags', got {type(self.tags)} instead"
        )
        assert self.tags, "'tags' cannot be empty"
        assert isinstance(self.build, BuildTag) or self.build is None, (
            f"'build' must be a BuildTag, got {type(self.build)} instead"
        )

        doc = MetadataDocument()
        doc.add("Wheel-Version", self.wheel_version)
        doc.add("Generator", self.generator)
        doc.add("Root-Is-Purelib", "true" if self.root_is_purelib else "false")
        for tag in self.tags:
            doc.add("Tag", tag)
        if self.build is not None:
            doc.add("Build", str(self.build))
        return doc

    def __str__(self) -> str:
        return str(self.to_document())

    @classmethod
    def from_document(cls, doc: MetadataDocument) -> 'WheelData':
        """Read WHEEL fields from a parsed document.

        Raises
        ------
        BadWheelFileError
            If the major Wheel-Version is not supported, or if
            Root-Is-Purelib, Tag, or Build fields are missing or invalid.
        """
        _check_wheel_version(doc.get_first('Wheel-Version'))

        purelib = doc.get_first('Root-Is-Purelib', '').lower()
        if purelib not in ('true', 'false'):
            raise BadWheelFileError(
                f"Root-Is-Purelib must be 'true' or 'false', "
                f"got {purelib!r}."
            )

        tags = doc.get_all('Tag')
        if not tags:
            raise BadWheelFileError("WHEEL does not declare any Tag.")

        args: Dict[str, Any] = {
            'generator': doc.get_first('Generator', ''),
            'root_is_purelib': purelib == 'true',
        }
        try:
            args['tags'] = tags
            args['build'] = doc.get_first('Build')
            return cls(**args)
        except ValueError as e:
            raise BadWheelFileError(f"Invalid WHEEL contents: {e}") from e

    @classmethod
    def from_str(cls, s: str) -> 'WheelData':
        return cls.from_document(MetadataDocument.from_str(s))

    def __eq__(self, other):
        if isinstance(other, WheelData):
            return all(getattr(self, f) == getattr(other, f)
                       for f in self.__slots__)
        else:
            return NotImplemented


MetadataFields = Union[
    Mapping[str, Union[str, Sequence[str]]],
    Iterable[Tuple[str, str]],
]


def _read_zip(data: bytes) -> Dict[str, bytes]:
    """Read all files from a zip container, skipping directory entries."""
    contents: Dict[str, bytes] = {}
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            names = zf.namelist()
            if len(set(names)) != len(names):
                raise BadWheelFileError(
                    "Archive contains multiple entries with the same name."
                )
            for zinfo in zf.infolist():
                reason = _unsafe_arcpath_reason(zinfo.filename)
                if reason is not None:
                    raise BadWheelFileError(
                        f"Archive contains an unsafe path "
                        f"{zinfo.filename!r}: {reason}."
                    )
                if zinfo.is_dir():
                    continue
                contents[zinfo.filename] = zf.read(zinfo)
    except (zipfile.BadZipFile, zlib.error, EOFError,
            NotImplementedError) as e:
        raise ArchiveCorruptError(f"Cannot read the zip container: {e}") from e
    return contents


def _find_distinfo_prefix(names: Iterable[str]) -> str:
    candidates = {path.split('/')[0] for path in names if '/' in path}
    candidates = {name for name in candidates
                  if name.endswith('.dist-info')}
    if len(candidates) > 1:
        logger.debug("Found .dist-info directories: %s", sorted(candidates))
        raise BadWheelFileError(
            "Multiple .dist-info directories found in the archive."
        )
    if len(candidates) == 0:
        raise BadWheelFileError(
            "Archive does not contain any .dist-info directory."
        )

    return candidates.pop()[:-len('dist-info')]


def _compressed(tags: Iterable[str]) -> str:
    return '.'.join(dict.fromkeys(tags))


class WheelArchive:
    """An in-memory archive that follows the wheel specification.

    Used to create, read, or verify `.whl` files.

    Objects of this class have one of two lifecycles:

    - Built from scratch via ``__init__``: files are added using `writestr`
      and the like, metadata is filled in through `metadata`, `wheeldata`,
      and `entry_points` attributes. The archive is finalized once, when
      `to_bytes` (or `write_to_directory`) is first called. After that it
      cannot be modified.
    - Read from an existing archive via `from_bytes` or `from_file`. Such
      objects are read-only from the start.

    Attributes
    ----------
    metadata : MetadataDocument
        Contents of .dist-info/METADATA.

        When building, it starts with Metadata-Version, Name, and Version
        fields, taken from the arguments given to `__init__`.

    wheeldata : WheelData
        Contents of .dist-info/WHEEL.

        When building, it is initialized using `build_tag`, `language_tag`,
        `abi_tag`, `platform_tag`, `root_is_purelib`, and `generator`
        arguments.

    record : WheelRecord
        Contents of .dist-info/RECORD.

        When building, it stays empty until the archive is finalized.

    entry_points : EntryPoints
        Contents of .dist-info/entry_points.txt. Empty if there is no such
        file.
    """
    METADATA_FILENAMES = {"WHEEL", "METADATA", "RECORD"}
    ENTRY_POINTS_FILENAME = 'entry_points.txt'
    # Core metadata name rules, with underscores allowed at the ends
    DISTNAME_RE = re.compile(
        r"^[A-Z0-9_]([A-Z0-9._-]*[A-Z0-9_])?\Z", re.IGNORECASE | re.ASCII
    )

    def __init__(
        self,
        distname: str,
        version: Union[str, Version],
        *,
        build_tag: Union[BuildTag, int, str, None] = None,
        language_tag: str = 'py3',
        abi_tag: str = 'none',
        platform_tag: str = 'any',
        root_is_purelib: bool = True,
        generator: Optional[str] = None,
        hash_algo: Union[str, Digester] = DEFAULT_HASH_ALGO,
        compression: int = zipfile.ZIP_DEFLATED,
        compresslevel: Optional[int] = None,
        date_time: Tuple[int, int, int, int, int, int] = ZIP_DATE_TIME,
    ) -> None:
        """Create a new wheel.

        Parameters
        ----------
        distname
            Name of the distribution. Must consist only of ASCII
            alphanumerics, hyphens, underscores, and periods, and cannot start
            or end with a hyphen or a period.

        version
            A string that contains PEP-440 compatible version identifier, or
            a `packaging.version.Version` object.

        build_tag
            Optional build tag of the distribution. Must start with a digit.
            See `WheelData` docstring for information about semantics of this
            field.

        language_tag, abi_tag, platform_tag
            Compatibility tags. See PEP-425 for the full specification. Each
            may be a compressed tag set, e.g. ``py2.py3``.

            Default to `'py3'`, `'none'`, and `'any'` respectively.

        root_is_purelib
            Whether the root of the archive gets installed into purelib
            (True) or platlib (False).

        generator
            Name and version of the program that generated the wheel. By
            default, "wheelsmith {__version__}" is used.

        hash_algo
            Name of a :mod:`hashlib` algorithm used for RECORD, or a
            :class:`Digester` object.

        compression
            Either `zipfile.ZIP_DEFLATED` (the default) or
            `zipfile.ZIP_STORED`.

        compresslevel
            Compression level to use when writing to the archive.

            See `zipfile.ZipFile` documentation for the full description.

        date_time
            Modification time set on every file in the archive. Defaults to
            the earliest time a zip file can hold.

        Raises
        ------
        ValueError
            If distname, version, or build_tag is invalid, or if an
            unsupported compression method is given.

        UnsupportedHashTypeError
            If the hash algorithm cannot be used for RECORD.
        """
        if compression not in (zipfile.ZIP_DEFLATED, zipfile.ZIP_STORED):
            raise ValueError(
                f"Only ZIP_DEFLATED and ZIP_STORED compression methods are "
                f"supported, got {compression!r}."
            )
        self._check_distname(distname)

        self._distname = distname
        self._version = self._to_version(version)
        self._build_tag = _to_build_tag(build_tag)
        self._language_tag = language_tag
        self._abi_tag = abi_tag
        self._platform_tag = platform_tag

        self._compression = compression
        self._compresslevel = compresslevel
        self._date_time = date_time

        self._distinfo_prefix: Optional[str] = None
        self._source_filename: Optional[WheelFilename] = None
        self._files: Dict[str, bytes] = {}
        # Set once the archive is finalized or read
        self._contents: Optional[Dict[str, bytes]] = None
        self._data: Optional[bytes] = None

        collapsed_tags = '-'.join((language_tag, abi_tag, platform_tag))
        wheeldata_args: Dict[str, Any] = {
            'root_is_purelib': root_is_purelib,
            'tags': collapsed_tags,
            'build': self._build_tag,
        }
        if generator is not None:
            wheeldata_args['generator'] = generator
        self.wheeldata = WheelData(**wheeldata_args)
        self.metadata = MetadataDocument([
            ("Metadata-Version", METADATA_VERSION),
            ("Name", distname),
            ("Version", str(self._version)),
        ])
        self.record = WheelRecord(hash_algo)
        self.entry_points = EntryPoints()

    def _check_distname(self, distname: str):
        if not isinstance(distname, str):
            raise TypeError(
                f"'distname' must be a string, got {type(distname)} instead."
            )
        if distname == '':
            raise ValueError("Distname cannot be an empty string.")
        if not self.DISTNAME_RE.match(distname):
            raise ValueError(
                f"Invalid distname: {repr(distname)}. Distnames should "
                f"contain only ASCII letters, numbers, hyphens, underscores, "
                f"and periods, and cannot start or end with a hyphen or a "
                f"period."
            )

    @staticmethod
    def _to_version(version: Union[str, Version]) -> Version:
        if isinstance(version, Version):
            return version
        if not isinstance(version, str):
            raise TypeError(
                "'version' must be either packaging.version.Version or a string"
            )
        try:
            return Version(version)
        except InvalidVersion as e:
            raise ValueError(f"Invalid version: {repr(version)}.") from e

    @classmethod
    def from_bytes(cls, data: bytes, *, verify: bool = True,
                   filename: Optional[str] = None,
                   hash_algo: Union[str, Digester] = DEFAULT_HASH_ALGO
                   ) -> 'WheelArchive':
        """Read a wheel from its bytes.

        The metadata files are parsed, and unless `verify` is False, contents
        of the archive are checked against its RECORD. Every problem found by
        the check is reported at once.

        Parameters
        ----------
        data
            Contents of the `.whl` file.

        verify
            Keyword only. Whether to check the contents against RECORD.

        filename
            Keyword only. Name of the file the data came from. If given, it is
            parsed and checked against the archive contents (see
            `validate()`).

        hash_algo
            Keyword only. Name of a :mod:`hashlib` algorithm or a
            :class:`Digester`. RECORD entries naming this algorithm are
            checked with it, the rest with :func:`digester_for`. Pass the
            same :class:`Digester` the wheel was built with to read wheels
            hashed with a custom digest function.

        Raises
        ------
        ArchiveCorruptError
            If the zip container is broken.

        BadWheelFileError
            If there is not exactly one .dist-info directory, if any of
            METADATA, WHEEL, or RECORD is missing, or if the contents of these
            files are inconsistent with each other or with the filename.

        MalformedMetadataError, MalformedRecordRowError
            If METADATA, WHEEL, entry_points.txt, or RECORD cannot be parsed.

        InvalidFilenameError
            If `filename` is given, and it is not a valid wheel filename.

        IntegrityError
            If contents of the archive do not match its RECORD. The archive,
            which is otherwise fully read, is available through its `archive`
            attribute.
        """
        wa = cls.__new__(cls)
        wa._load(data, filename, hash_algo)
        wa.validate()

        logger.debug("Read %s: %d files.", wa.filename, len(wa._contents))

        if verify:
            discrepancies = wa.verify()
            if discrepancies:
                raise IntegrityError(discrepancies, archive=wa)
        return wa

    @classmethod
    def from_file(cls, file_or_path: Union[str, Path, BinaryIO], *,
                  verify: bool = True,
                  hash_algo: Union[str, Digester] = DEFAULT_HASH_ALGO
                  ) -> 'WheelArchive':
        """Read a wheel from a path or a binary file object.

        The filename is taken from the path, or from the `name` attribute of
        the file object, if it has one. See `from_bytes` for the rest.
        """
        assert not isinstance(file_or_path, io.TextIOBase), (
            "Text buffer given where a binary one was expected."
        )

        if isinstance(file_or_path, (str, Path)):
            path = Path(file_or_path)
            return cls.from_bytes(path.read_bytes(), verify=verify,
                                  filename=path.name, hash_algo=hash_algo)

        name = getattr(file_or_path, 'name', None)
        filename = Path(name).name if isinstance(name, str) else None
        return cls.from_bytes(file_or_path.read(), verify=verify,
                              filename=filename, hash_algo=hash_algo)

    def _read_text(self, contents: Mapping[str, bytes], name: str) -> str:
        path = self._distinfo_path(name)
        if path not in contents:
            raise BadWheelFileError(
                f"{name} file is not present in the archive."
            )
        try:
            return contents[path].decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedMetadataError(
                f"Not a valid UTF-8 text: {e}.", path=path
            ) from e

    def _parse(self, parse: Callable[[str], Any],
               contents: Mapping[str, bytes], name: str) -> Any:
        text = self._read_text(contents, name)
        try:
            return parse(text)
        except WheelParseError as e:
            raise e.with_path(self._distinfo_path(name)) from e

    def _load(self, data: bytes, filename: Optional[str],
              hash_algo: Union[str, Digester]):
        contents = _read_zip(data)

        self._files = {}
        self._data = data
        self._contents = contents
        self._compression = zipfile.ZIP_DEFLATED
        self._compresslevel = None
        self._date_time = ZIP_DATE_TIME
        self._source_filename = (
            parse_filename(filename) if filename is not None else None
        )
        self._distinfo_prefix = _find_distinfo_prefix(contents)

        self.metadata = self._parse(MetadataDocument.from_str, contents,
                                    'METADATA')
        self.wheeldata = self._parse(WheelData.from_str, contents, 'WHEEL')
        self.record = self._parse(
            lambda s: WheelRecord.from_str(s, hash_algo), contents, 'RECORD'
        )

        self.entry_points = EntryPoints()
        if self._distinfo_path(self.ENTRY_POINTS_FILENAME) in contents:
            self.entry_points = self._parse(
                EntryPoints.from_str, contents, self.ENTRY_POINTS_FILENAME
            )

        distname = self.metadata.get_first('Name')
        if distname is None:
            raise BadWheelFileError("METADATA does not contain Name.")
        version = self.metadata.get_first('Version')
        if version is None:
            raise BadWheelFileError("METADATA does not contain Version.")
        self._distname = distname
        try:
            self._version = Version(version)
        except InvalidVersion as e:
            raise BadWheelFileError(
                f"METADATA contains invalid version: {version!r}."
            ) from e

        self._build_tag = self.wheeldata.build
        tags = [Tag(*tag.split('-')) for tag in self.wheeldata.tags]
        self._language_tag = _compressed(t.interpreter for t in tags)
        self._abi_tag = _compressed(t.abi for t in tags)
        self._platform_tag = _compressed(t.platform for t in tags)

        skip = {self._distinfo_path(n) for n in self.METADATA_FILENAMES}
        self._files = {path: contents[path] for path in contents
                       if path not in skip}

    # TODO: validate metadata fields, e.g. ensure Name matches the
    # .dist-info directory name
    def validate(self):
        """Check that the wheel is consistent with its filename.

        Only wheels read from a named file have anything to check here.

        Raises
        ------
        BadWheelFileError
            If the distribution name, the version, or the build tag in the
            filename differ from the ones in METADATA and WHEEL.
        """
        source = self._source_filename
        if source is None:
            return

        distname = canonicalize_name(self.distname).replace('-', '_')
        if source.normalized_name != distname:
            raise BadWheelFileError(
                f"Distribution name in the filename ({source.distribution!r}) "
                f"is different than the one in METADATA "
                f"({self.distname!r})."
            )

        try:
            same_version = Version(source.version) == self.version
        except InvalidVersion:
            same_version = False
        if not same_version:
            raise BadWheelFileError(
                f"Version in the filename ({source.version!r}) is different "
                f"than the one in METADATA ({str(self.version)!r})."
            )

        if source.build_tag != self.wheeldata.build:
            raise BadWheelFileError(
                "WHEEL build tag is different than the one in the filename"
            )

    def verify(self, *, workers: Optional[int] = None) -> List[Discrepancy]:
        """Check contents of the finalized archive against its RECORD.

        Unlike `from_bytes`, this never raises on discrepancies; a list of
        them, sorted by path, is returned instead.

        Parameters
        ----------
        workers
            Keyword only. If greater than 1, digests are computed using a
            thread pool of this size.

        Raises
        ------
        RuntimeError
            If the archive is still being built.
        """
        if self._contents is None:
            raise RuntimeError(
                "Cannot verify: the archive has not been finalized yet."
            )
        discrepancies = self.record.verify(
            self._contents, digester=self.record.digester, workers=workers
        )
        if discrepancies:
            logger.debug("%s: %d discrepancies with RECORD found.",
                         self.filename, len(discrepancies))
        return discrepancies

    @property
    def finalized(self) -> bool:
        return self._data is not None

    def _check_writable(self):
        if self.finalized:
            raise RuntimeError(
                "Cannot modify the archive: it is finalized or read-only."
            )

    def _check_arcname(self, arcname: str):
        reason = _unsafe_arcpath_reason(arcname)
        if reason is not None:
            raise ProhibitedWriteError(f"Cannot write {arcname!r}: {reason}.")
        if arcname.endswith('/'):
            raise ProhibitedWriteError(
                f"Cannot write {arcname!r}: directories are created implicitly."
            )
        if arcname in {self._distinfo_path(n) for n in self.METADATA_FILENAMES}:
            raise ProhibitedWriteError(
                f"Write would result in a duplicated metadata file: {arcname}."
            )

        # A path cannot be both a file and a directory
        parts = arcname.split('/')
        for idx in range(1, len(parts)):
            parent = '/'.join(parts[:idx])
            if parent in self._files:
                raise ProhibitedWriteError(
                    f"Cannot write {arcname!r}: {parent!r} is a file."
                )
        prefix = arcname + '/'
        if any(path.startswith(prefix) for path in self._files):
            raise ProhibitedWriteError(
                f"Cannot write {arcname!r}: it is a directory."
            )

    def writestr(self, arcname: str, data: Union[bytes, str]) -> None:
        """Write given data into the wheel under the given path.

        Writing into the same path twice replaces the previous contents.

        Parameters
        ----------
        arcname
            Specifies the path in the archive under which the data will be
            stored. Must be a relative, POSIX-style path without '..'
            segments.

        data
            The data that will be writen into the archive. If it's a string, it
            is encoded as UTF-8 first.

        Raises
        ------
        ProhibitedWriteError
            If the path is unsafe, points at METADATA, WHEEL, or RECORD, or
            conflicts with a file or directory already in the archive.

        RuntimeError
            If the archive is finalized or read-only.
        """
        self._check_writable()
        self._check_arcname(arcname)
        if isinstance(data, str):
            data = data.encode('utf-8')
        self._files[arcname] = bytes(data)

    def add_files(self, files: Mapping[str, Union[bytes, str]]) -> None:
        """Write each file from a mapping of archive paths to contents."""
        for arcname, data in files.items():
            self.writestr(arcname, data)

    def writestr_data(self, section: str, arcname: str,
                      data: Union[bytes, str]) -> None:
        """Write given data to the .data directory under a specified section.

        This method is a handy shortcut for writing into
        `<dist>-<version>.data/`, such that you dont have to generate the path
        yourself.

        Parameters
        ----------
        section
            Name of the section, i.e. the directory inside `.data/` that the
            file should be put into. Sections have special meaning, see PEP-427.
            Cannot contain any slashes, nor be empty.

        arcname
            Specifies the path in the archive under which the data will be
            stored. This is relative to the path of the section directory.
            Leading slashes are stripped.

        data
            The data that will be writen into the archive. If it's a string, it
            is encoded as UTF-8 first.
        """
        self._check_section(section)
        arcname = self._distinfo_path(section + '/' + arcname.lstrip('/'),
                                      kind='data')
        self.writestr(arcname, data)

    def writestr_distinfo(self, arcname: str, data: Union[bytes, str]) -> None:
        """Write given data to the .dist-info directory.

        This method is a handy shortcut for writing into
        `<dist>-<version>.dist-info/`, such that you dont have to generate the
        path yourself.

        Does not permit writing into arcpaths of metadata files managed by this
        class.

        Raises
        ------
        ProhibitedWriteError
            When attempting to write into `METADATA`, `WHEEL`, or `RECORD`.
        """
        arcname = arcname.lstrip('/')
        if arcname.split('/')[0] in self.METADATA_FILENAMES:
            raise ProhibitedWriteError(
                f"Write would result in a duplicated metadata file: {arcname}."
            )
        self.writestr(self._distinfo_path(arcname), data)

    @staticmethod
    def _check_section(section):
        if section == '':
            raise ValueError("Section cannot be an empty string.")
        if '/' in section:
            raise ValueError("Section cannot contain slashes.")

    def add_metadata(self, fields: MetadataFields) -> None:
        """Append fields to METADATA.

        Parameters
        ----------
        fields
            Either a mapping or an iterable of ``(name, value)`` pairs. In a
            mapping, a list of values results in a field repeated for each of
            them, e.g. ``{'Classifier': ['A', 'B']}``.

        Raises
        ------
        ProhibitedWriteError
            If Metadata-Version, Name, or Version is given; these fields are
            managed by this class.
        """
        self._check_writable()
        items = fields.items() if isinstance(fields, Mapping) else fields
        for name, value in items:
            if name.lower() in ('metadata-version', 'name', 'version'):
                raise ProhibitedWriteError(
                    f"{name} field is set by the archive itself."
                )
            values = [value] if isinstance(value, str) else list(value)
            for v in values:
                self.metadata.add(name, v)

    def set_license_expression(
        self, expression: str,
        validator: Optional[Callable[[str], Union[str, bool]]] = None,
    ) -> str:
        """Set the License-Expression field of METADATA.

        The expression is checked by the validator first. Since this field was
        introduced in Metadata-Version 2.4, the version is raised accordingly.

        Parameters
        ----------
        expression
            SPDX license expression, e.g. ``"MIT OR Apache-2.0"``.

        validator
            Callable that either returns the expression in its canonical form,
            or returns a boolean telling whether the expression is valid. It
            may also raise `ValueError` for invalid expressions. By default,
            `packaging.licenses.canonicalize_license_expression` is used.

        Returns
        -------
        str
            The expression as it was written into METADATA.

        Raises
        ------
        ValueError
            If the expression is invalid.
        """
        self._check_writable()
        if validator is None:
            validator = canonicalize_license_expression
        result = validator(expression)
        if result is False:
            raise ValueError(f"Invalid license expression: {expression!r}.")
        canonical = expression if result is True else result
        self.metadata.set('License-Expression', canonical)
        self.metadata.set('Metadata-Version', LICENSE_METADATA_VERSION)
        return canonical

    def add_entry_point(self, group: str, name: str, value: str) -> None:
        """Add an entry to .dist-info/entry_points.txt.

        For example, ``add_entry_point('console_scripts', 'tool',
        'package.cli:main')`` makes installers create a ``tool`` script.
        """
        self._check_writable()
        self.entry_points.add(group, name, value)

    def _zipinfo(self, arcname: str) -> zipfile.ZipInfo:
        zinfo = zipfile.ZipInfo(arcname, date_time=self._date_time)
        zinfo.create_system = _ZIP_UNIX_SYSTEM
        zinfo.external_attr = (stat.S_IFREG | ZIP_FILE_MODE) << 16
        zinfo.compress_type = self._compression
        return zinfo

    def to_bytes(self, *, workers: Optional[int] = None) -> bytes:
        """Finalize the archive and return contents of the `.whl` file.

        On the first call, METADATA, WHEEL, and RECORD are generated and the
        archive stops accepting writes. Later calls return the same bytes.
        For archives that were read, the original bytes are returned.

        Files are stored in a fixed order: all the files written into the
        archive sorted by path, then METADATA, WHEEL, and RECORD. Every file
        gets the same modification time and permissions, so the same contents
        always produce the same bytes.

        Parameters
        ----------
        workers
            Keyword only. If greater than 1, RECORD hashes are computed using
            a thread pool of this size.

        Raises
        ------
        ProhibitedWriteError
            If entry points were added using `add_entry_point` while
            entry_points.txt was also written directly.
        """
        if self._data is not None:
            return self._data

        files = dict(self._files)
        if self.entry_points:
            entry_points_path = self._distinfo_path(self.ENTRY_POINTS_FILENAME)
            if entry_points_path in files:
                raise ProhibitedWriteError(
                    f"{self.ENTRY_POINTS_FILENAME} was written directly, and "
                    f"entry points were added as well."
                )
            files[entry_points_path] = str(self.entry_points).encode('utf-8')

        if 'Metadata-Version' not in self.metadata:
            self.metadata.fields.insert(
                0, ("Metadata-Version", METADATA_VERSION)
            )

        metadata_path = self._distinfo_path("METADATA")
        wheel_path = self._distinfo_path("WHEEL")
        record_path = self._distinfo_path("RECORD")
        metadata = str(self.metadata).encode('utf-8')
        wheeldata = str(self.wheeldata).encode('utf-8')

        # Signatures of RECORD cannot be listed in it
        listed = {path: data for path, data in files.items()
                  if not _is_record_path(path)}
        record = WheelRecord.build(listed, self.record.digester,
                                   workers=workers)
        record.update(metadata_path, metadata)
        record.update(wheel_path, wheeldata)
        record.add_entry(RecordEntry(record_path, '', '', None))
        self.record = record

        contents = {path: files[path] for path in sorted(files)}
        contents[metadata_path] = metadata
        contents[wheel_path] = wheeldata
        contents[record_path] = str(record).encode('utf-8')

        buf = io.BytesIO()
        with zipfile.ZipFile(buf, 'w', compression=self._compression,
                             compresslevel=self._compresslevel) as zf:
            for path, data in contents.items():
                zf.writestr(self._zipinfo(path), data,
                            compress_type=self._compression,
                            compresslevel=self._compresslevel)

        self._files = files
        self._contents = contents
        self._data = buf.getvalue()
        logger.debug("Built %s: %d files, %d bytes.",
                     self.filename, len(contents), len(self._data))
        return self._data

    def write_to_directory(self, directory: Union[str, Path], *,
                           workers: Optional[int] = None) -> Path:
        """Finalize the archive and save it into a directory.

        The file is named after `filename`.

        Returns
        -------
        Path
            Path to the written file.
        """
        path = Path(directory) / self.filename
        path.write_bytes(self.to_bytes(workers=workers))
        return path

    def _distinfo_path(self, filename: str, *, kind='dist-info') -> str:
        if self._distinfo_prefix is None:
            name = canonicalize_name(self.distname).replace("-", "_")
            version = str(self.version).replace("-", "_")
            self._distinfo_prefix = f"{name}-{version}."

        return f"{self._distinfo_prefix}{kind}/{filename}"

    @property
    def wheel_filename(self) -> WheelFilename:
        """Parsed filename of this wheel.

        For wheels read from a named file, that file's name. Otherwise, a name
        generated from the distribution name, version, and tags.
        """
        if self._source_filename is not None:
            return self._source_filename
        return WheelFilename(
            canonicalize_name(self.distname).replace('-', '_'),
            str(self.version).replace('-', '_'),
            self.build_tag,
            _split_compressed(self.language_tag),
            _split_compressed(self.abi_tag),
            _split_compressed(self.platform_tag),
            'whl',
        )

    @property
    def filename(self) -> str:
        return str(self.wheel_filename)

    @property
    def distname(self) -> str:
        return self._distname

    @property
    def version(self) -> Version:
        return self._version

    @property
    def build_tag(self) -> Optional[BuildTag]:
        return self._build_tag

    @property
    def language_tag(self) -> str:
        return self._language_tag

    @property
    def abi_tag(self) -> str:
        return self._abi_tag

    @property
    def platform_tag(self) -> str:
        return self._platform_tag

    @property
    def tags(self) -> Tuple[Tag, ...]:
        return expand_tags(self.wheel_filename)

    @property
    def distinfo_dirname(self):
        return self._distinfo_path("", kind="dist-info")[:-1]

    @property
    def data_dirname(self):
        return self._distinfo_path("", kind="data")[:-1]

    def namelist(self) -> List[str]:
        """Return a sorted list of wheel members by name, omit metadata files.

        Omits ``RECORD``, ``METADATA``, and ``WHEEL`` files.
        """
        return sorted(self._files)

    def read(self, arcname: str) -> bytes:
        """Return contents of a file in the archive.

        Metadata files can only be read once the archive is finalized.

        Raises
        ------
        KeyError
            If there is no such file.
        """
        if self._contents is not None:
            return self._contents[arcname]
        return self._files[arcname]

    def read_data(self, section: str) -> Dict[str, bytes]:
        """Return files from a section of the .data directory.

        Keys of the returned mapping are paths relative to the section
        directory.
        """
        self._check_section(section)
        prefix = self._distinfo_path(section + '/', kind='data')
        return {path[len(prefix):]: self._files[path]
                for path in sorted(self._files) if path.startswith(prefix)}

    def __repr__(self) -> str:
        state = 'finalized' if self.finalized else 'building'
        return f"<WheelArchive {self.filename!r} ({state})>"


def build_wheel(
    distname: str,
    version: Union[str, Version],
    files: Mapping[str, Union[bytes, str]],
    metadata_fields: MetadataFields = (),
    hash_algo: Union[str, Digester] = DEFAULT_HASH_ALGO,
    *,
    workers: Optional[int] = None,
    **options: Any,
) -> bytes:
    """Build a wheel in one go and return its bytes.

    This is a shortcut for creating a :class:`WheelArchive`, writing `files`
    and `metadata_fields` into it, and calling `to_bytes()`. The rest of
    keyword arguments are passed to :class:`WheelArchive`.
    """
    wa = WheelArchive(distname, version, hash_algo=hash_algo, **options)
    wa.add_metadata(metadata_fields)
    wa.add_files(files)
    return wa.to_bytes(workers=workers)


def open_wheel(data: bytes, *, verify: bool = True,
               filename: Optional[str] = None,
               hash_algo: Union[str, Digester] = DEFAULT_HASH_ALGO
               ) -> WheelArchive:
    """Read a wheel from its bytes. See `WheelArchive.from_bytes`."""
    return WheelArchive.from_bytes(data, verify=verify, filename=filename,
                                   hash_algo=hash_algo)
