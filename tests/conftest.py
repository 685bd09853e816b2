import struct

import pytest


def pack_field(name, tag, length, decimal=0, encoding='utf-8'):
    return struct.pack('<11sc4sBB14s', name.encode(encoding).ljust(11, b'\x00'),
                       tag.encode('ascii'), bytes(4), length, decimal, bytes(14))


def record(*cells, deleted=False):
    return (b'*' if deleted else b' ') + b''.join(cells)


def build_dbf(fields, records, record_count=None, backlink=b'', trailer=b'\x1a',
              encoding='utf-8', header_length=None):
    """
    Assemble DBF bytes by hand

    fields: (name, tag, length[, decimal]) tuples
    records: full record bytes including the deletion flag
    """
    if record_count is None:
        record_count = len(records)
    if header_length is None:
        header_length = 32 + 32 * len(fields) + 1 + len(backlink)
    record_length = 1 + sum(f[2] for f in fields)
    head = struct.pack('<BBBBIHH20s', 0x30, 124, 1, 15, record_count,
                       header_length, record_length, bytes(20))
    table = b''.join(pack_field(*f, encoding=encoding) for f in fields)
    return head + table + b'\r' + backlink + b''.join(records) + trailer


@pytest.fixture
def make_dbf(tmp_path):
    def _make(fields, records, name='data.dbf', **kwargs):
        path = tmp_path / name
        path.write_bytes(build_dbf(fields, records, **kwargs))
        return path
    return _make


@pytest.fixture
def make_csv(tmp_path):
    def _make(text, name='data.csv', encoding='utf-8'):
        path = tmp_path / name
        path.write_bytes(text.encode(encoding))
        return path
    return _make
