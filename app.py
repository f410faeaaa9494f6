import logging
import os

from flask import Flask, jsonify, request

from oauth_unpacker import UnpackErrorKind, Unpacker, load_config
from oauth_unpacker.flask_request import FlaskRequest

app = Flask(__name__)

unpacker = Unpacker(load_config())

ERROR_STATUS = {
    UnpackErrorKind.UNKNOWN_AUTH_TYPE: 401,
    UnpackErrorKind.MALFORMED_REQUEST: 400,
    UnpackErrorKind.UNPACKER: 500,
}

UNPACK_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@app.route("/health")
def health():
    return jsonify(status="ok")


@app.route("/unpack", defaults={"path": ""}, methods=UNPACK_METHODS)
@app.route("/unpack/<path:path>", methods=UNPACK_METHODS)
def unpack(path):
    result = unpacker.unpack(FlaskRequest(request))
    if result.ok:
        return jsonify(result.request.to_dict())

    response = jsonify(error=result.error.message, kind=result.kind.value)
    response.status_code = ERROR_STATUS[result.kind]
    if result.kind is UnpackErrorKind.UNKNOWN_AUTH_TYPE:
        response.headers["WWW-Authenticate"] = "OAuth, Bearer"
    return response


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(debug=os.environ.get("FLASK_DEBUG") == "1")
