"""Mapping of service results to HTTP responses"""
from rest_framework import status
from rest_framework.response import Response


def error_response(result):
    body = {key: value for key, value in result.items() if key not in ('success', 'status_code')}
    return Response(body, status=result.get('status_code', status.HTTP_500_INTERNAL_SERVER_ERROR))


def service_response(result, build=None, success_status=status.HTTP_200_OK):
    """
    Return the failure body with its status code, or the success payload
    passed through `build` (defaults to the payload minus the success flag).
    """
    if not result['success']:
        return error_response(result)
    if build is None:
        body = {key: value for key, value in result.items() if key != 'success'}
    else:
        body = build(result)
    return Response(body, status=success_status)
