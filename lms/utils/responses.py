from flask import jsonify, request

from ..errors import ValidationError


def json_body():
    """Request payload as a dict, from JSON or a submitted form"""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object.')
    return data


def success(status=200, **payload):
    return jsonify({'success': True, **payload}), status
