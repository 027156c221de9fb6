from flask import jsonify


def success_response(message, data=None, status_code=200):
    """Wrap a payload in the `{"message", "data"}` envelope every endpoint returns."""
    return jsonify({"message": message, "data": data}), status_code


def error_response(message, status_code=400, code=None):
    """Error envelope for failures that are not a BakeryError (routing, unexpected exceptions)."""
    body = {"error": message}
    if code:
        body["code"] = code
    return jsonify(body), status_code
