

import pytest
from dbfcsv.config import ConversionConfig
from dbfcsv.exceptions import FormatError
from dbfcsv.schema.analyzer import analyze_csv
from dbfcsv.schema.source import CsvSource


@pytest.fixture
def config():
    return ConversionConfig()


def widths(analysis):
    return [(f.name, f.length) for f in analysis.fields]


def test_infers_character_fields(make_csv, config):
    path = make_csv(" id ,name\n1,alice\n22,bob\n")
    analysis = analyze_csv(CsvSource(path, config))

    assert widths(analysis) == [('ID', 2), ('NAME', 5)]
    assert all(f.tag == 'C' and f.decimal == 0 for f in analysis.fields)
    assert analysis.record_count == 2
    assert analysis.malformed_rows == 0


def test_width_is_encoded_byte_length(make_csv):
    path = make_csv("name\n中文\n", encoding='gb18030')
    analysis = analyze_csv(CsvSource(path, ConversionConfig(encoding='GBK')))
    assert widths(analysis) == [('NAME', 4)]

    path = make_csv("name\n中文\n", name='utf.csv')
    analysis = analyze_csv(CsvSource(path, ConversionConfig()))
    assert widths(analysis) == [('NAME', 6)]


def test_width_clamped_to_254(make_csv, config):
    path = make_csv("memo\n" + "x" * 300 + "\n")
    assert widths(analyze_csv(CsvSource(path, config))) == [('MEMO', 254)]


def test_empty_body(make_csv, config):
    analysis = analyze_csv(CsvSource(make_csv("a,b,c\n"), config))
    assert widths(analysis) == [('A', 1), ('B', 1), ('C', 1)]
    assert analysis.record_count == 0


def test_no_header_is_fatal(make_csv, config):
    with pytest.raises(FormatError):
        analyze_csv(CsvSource(make_csv(""), config))


def test_malformed_rows_excluded_from_count(make_csv, config):
    text = 'a,b\n1,2\n"bad"x,3\n4,5,6\n7\n8,9\n'
    source = CsvSource(make_csv(text), config)
    analysis = analyze_csv(source)

    assert analysis.record_count == 2
    assert analysis.malformed_rows == 3
    # The write pass sees exactly the counted rows
    assert list(source.body()) == [['1', '2'], ['8', '9']]


def test_blank_lines_ignored(make_csv, config):
    source = CsvSource(make_csv("a\n\n1\n\n2\n"), config)
    analysis = analyze_csv(source)
    assert analysis.record_count == 2
    assert analysis.malformed_rows == 0


def test_quoted_fields_with_delimiters_and_newlines(make_csv):
    config = ConversionConfig(delimiter=';', quote="'")
    source = CsvSource(make_csv("a;b\n'x;y';'line1\nline2'\n"), config)
    assert list(source.body()) == [['x;y', 'line1\nline2']]


def test_utf8_bom_stripped(make_csv, config):
    path = make_csv("\ufeffid,name\n1,a\n")
    analysis = analyze_csv(CsvSource(path, config))
    assert analysis.fields[0].name == 'ID'


def test_each_scan_reopens_file(make_csv, config):
    source = CsvSource(make_csv("a\n1\n2\n"), config)
    assert list(source.body()) == [['1'], ['2']]
    assert list(source.body()) == [['1'], ['2']]


def test_cell_beyond_csv_field_limit_is_kept(make_csv, config):
    source = CsvSource(make_csv("a,b\n" + "x" * 200000 + ",1\nok,2\n"), config)
    analysis = analyze_csv(source)
    assert analysis.record_count == 2
    assert analysis.malformed_rows == 0
    assert widths(analysis) == [('A', 254), ('B', 1)]
