"""Router with automatic form decoding and response handling."""

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any
from uuid import uuid4

import orjson
from asgi_correlation_id import correlation_id
from pydantic import BaseModel
from robyn import Request, Response, SubRouter, status_codes
from robyn.robyn import HttpMethod

from app.core.errors import MultipartError
from app.core.logger import LogIcon, logger
from app.models.core import FormData
from app.multipart.request import read_request_form

FORM_ENDPOINTS: set[str] = set()
REQUEST_ID_HEADER = "x-request-id"


def json_response(status_code: int, content: BaseModel | dict, headers: dict | None = None) -> Response:
    """Serialize a model (camelCase aliases, no nulls) or dict into a JSON Response."""
    match content:
        case BaseModel():
            description = content.model_dump_json(by_alias=True, exclude_none=True)
        case _:
            description = orjson.dumps(content).decode()
    return Response(
        status_code=status_code,
        headers={"content-type": "application/json", **(headers or {})},
        description=description,
    )


def parse_form_params(sig: inspect.Signature) -> set[str]:
    """Names of the handler parameters annotated with FormData."""
    return {name for name, param in sig.parameters.items() if param.annotation is FormData}


async def parse_request_form(
    form_params: set[str],
    request: Request,
    kwargs: dict[str, Any],
) -> Response | None:
    """Decode the request body into FormData kwargs."""
    if not form_params:
        return None

    try:
        form = await read_request_form(request)
    except MultipartError as ex:
        logger.warning("Request form rejected", icon=LogIcon.FORBIDDEN, error=ex.code, detail=ex.message)
        return json_response(ex.status_code, ex.to_dict())

    for param_name in form_params:
        kwargs[param_name] = form

    return None


def parse_response(result: Any) -> Response:
    """Convert handler result to Response."""
    match result:
        case Response():
            return result
        case BaseModel() | dict():
            return json_response(status_codes.HTTP_200_OK, result)
        case _:
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={},
                description=str(result),
            )


HTTP_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.DELETE,
    HttpMethod.PATCH,
    HttpMethod.HEAD,
    HttpMethod.OPTIONS,
    HttpMethod.TRACE,
    HttpMethod.CONNECT,
)


def _create_method_wrapper(original_method: Callable, router_prefix: str = "") -> Callable:
    @wraps(original_method)
    def method_wrapper(*args, **kwargs) -> Callable:
        endpoint = args[0] if args else kwargs.get("endpoint", "")
        decorator = original_method(*args, **kwargs)

        def handler_decorator(handler: Callable) -> Callable:
            sig = inspect.signature(handler)
            form_params = parse_form_params(sig)
            has_request_param = "request" in sig.parameters

            if form_params:
                full_path = f"{router_prefix}{endpoint}".replace("//", "/")
                FORM_ENDPOINTS.add(full_path)

            @wraps(handler)
            async def wrapped_handler(request: Request, **h_kwargs):
                correlation_id.set(request.headers.get(REQUEST_ID_HEADER) or uuid4().hex)

                if form_params and (error := await parse_request_form(form_params, request, h_kwargs)):
                    return error

                # Pass request to handler only if it declared it
                if has_request_param:
                    h_kwargs["request"] = request

                result = await handler(**h_kwargs)
                return parse_response(result)

            # Build signature: always include request for Robyn injection, never the form params
            new_params = [inspect.Parameter("request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request)]
            new_params += [
                param for name, param in sig.parameters.items() if name != "request" and name not in form_params
            ]

            wrapped_handler.__signature__ = sig.replace(parameters=new_params)  # type: ignore[attr-defined]
            return decorator(wrapped_handler)

        return handler_decorator

    return method_wrapper


class Router(SubRouter):
    """Enhanced SubRouter with automatic form decoding and response handling."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._prefix = kwargs.get("prefix", "")
        self._wrap_methods()

    def _wrap_methods(self) -> None:
        """Wrap HTTP methods with parsing logic."""
        for method in HTTP_METHODS:
            method_name = str(method).split(".")[-1].lower()
            if hasattr(self, method_name):
                original_method = getattr(self, method_name)
                wrapped_method = _create_method_wrapper(original_method, self._prefix)
                setattr(self, method_name, wrapped_method)
