import io

from flask import request, send_file
from flask_restful import Resource, Api

from dbfcsv.exceptions import ConfigurationError, FormatError, DbfCsvError
from .models import conversion_service


def init_routes(api: Api):
    api.add_resource(EncodingList, '/api/encodings')
    api.add_resource(DbfToCsv, '/api/dbf2csv')
    api.add_resource(CsvToDbf, '/api/csv2dbf')
    api.add_resource(InspectDbf, '/api/inspect')


def _error(e: DbfCsvError):
    """Map converter errors to HTTP status codes"""
    if isinstance(e, ConfigurationError):
        return {'error': str(e)}, 400
    if isinstance(e, FormatError):
        return {'error': str(e)}, 422
    return {'error': str(e)}, 500


def _download(data: bytes, name: str, mimetype: str, stats):
    response = send_file(io.BytesIO(data), mimetype=mimetype, as_attachment=True, download_name=name)
    response.headers['X-Field-Count'] = str(stats.field_count)
    response.headers['X-Record-Count'] = str(stats.record_count)
    return response


class EncodingList(Resource):
    def get(self):
        return conversion_service.encodings()


class DbfToCsv(Resource):
    def post(self):
        upload = request.files.get('file')
        if not upload:
            return {'error': 'No file provided'}, 400

        try:
            data, name, stats = conversion_service.dbf_to_csv(upload, request.form)
        except DbfCsvError as e:
            return _error(e)
        return _download(data, name, 'text/csv', stats)


class CsvToDbf(Resource):
    def post(self):
        upload = request.files.get('file')
        if not upload:
            return {'error': 'No file provided'}, 400

        try:
            data, name, stats = conversion_service.csv_to_dbf(upload, request.form)
        except DbfCsvError as e:
            return _error(e)
        return _download(data, name, 'application/x-dbf', stats)


class InspectDbf(Resource):
    def post(self):
        upload = request.files.get('file')
        if not upload:
            return {'error': 'No file provided'}, 400

        try:
            return conversion_service.inspect(upload, request.form)
        except DbfCsvError as e:
            return _error(e)
