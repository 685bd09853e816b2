from flask import Flask
from flask_cors import CORS
from flask_restful import Api
from .routes import init_routes


def create_app():
    app = Flask(__name__)
    CORS(app)  # Enable CORS for browser uploads
    api = Api(app)

    # Initialize Routes
    init_routes(api)

    return app
