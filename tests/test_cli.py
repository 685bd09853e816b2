

import csv
import struct

from conftest import record
from dbfcsv.cli import main, derive_output_path
from pathlib import Path


def test_derive_output_path(tmp_path):
    assert derive_output_path(Path('data/x.dbf'), '.csv') == Path('data/x.csv')
    assert derive_output_path(Path('data/x.csv'), '.dbf', str(tmp_path)) == tmp_path / 'x.dbf'


def test_version(capsys):
    assert main(['version']) == 0
    assert capsys.readouterr().out.startswith('dbfcsv ')


def test_no_command(capsys):
    assert main([]) == 1


def test_dbf2csv_command(make_dbf, capsys):
    dbf = make_dbf([('ID', 'C', 2)], [record(b'01'), record(b'02', deleted=True)])

    assert main(['dbf2csv', '--deleted', 'skip', '-c', '1', str(dbf)]) == 0

    out = capsys.readouterr().out
    assert f"Processing: {dbf}" in out
    assert "Done:" in out
    with open(dbf.with_suffix('.csv'), newline='') as f:
        assert list(csv.reader(f)) == [['ID'], ['01']]


def test_csv2dbf_command_with_tab_delimiter(make_csv, tmp_path):
    src = make_csv("a\tb\nx\tyy\n")
    out_dir = tmp_path / 'out'

    assert main(['csv2dbf', '-f', '\\t', '-o', str(out_dir), str(src)]) == 0

    data = (out_dir / 'data.dbf').read_bytes()
    assert struct.unpack_from('<I', data, 4)[0] == 1
    assert data.endswith(b' xyy\x1a')


def test_missing_file_continues(make_csv, tmp_path, capsys):
    src = make_csv("a\n1\n")
    code = main(['csv2dbf', str(tmp_path / 'nope.csv'), str(src)])

    captured = capsys.readouterr()
    assert code == 1
    assert "File not found" in captured.err
    assert src.with_suffix('.dbf').exists()


def test_failed_file_output_removed(make_dbf, capsys):
    dbf = make_dbf([('A', 'C', 4)], [record(b'abcd'), b' a'], record_count=2, trailer=b'')

    assert main(['dbf2csv', '--deleted', 'export', str(dbf)]) == 1
    assert "Failed" in capsys.readouterr().err
    assert not dbf.with_suffix('.csv').exists()


def test_bad_encoding_is_configuration_error(make_csv, capsys):
    src = make_csv("a\n1\n")
    assert main(['csv2dbf', '-e', 'ebcdic', str(src)]) == 1
    assert "Unsupported encoding" in capsys.readouterr().err
    assert not src.with_suffix('.dbf').exists()


def test_info_command(make_dbf, capsys):
    dbf = make_dbf([('NAME', 'C', 10), ('QTY', 'I', 4)], [])
    assert main(['info', str(dbf)]) == 0
    out = capsys.readouterr().out
    assert "Version: 0x30" in out
    assert "NAME" in out and "QTY" in out
