"""
Built-in Tools
==============

Ready-made tools that can be registered on any agent:

    for tool in DEFAULT_TOOLS:
        agent.register_tool(tool)

- http_request: call an external HTTP API
- file_system: read, write or check files
- calculator: evaluate a math expression safely (SymPy)
- datetime: current time or reformat a date
- weather: current weather from OpenWeatherMap

Expected failures (bad input, HTTP errors, missing files) come back as an
{"error": ...} result rather than an exception, so callers can show them
directly.
"""

import asyncio
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import httpx
from sympy import N, SympifyError
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)

from aigent.types import Tool
from aigent.utils.logger import Logger

logger = Logger("BuiltinTools")

HTTP_TIMEOUT = 10.0
WEATHER_API = "https://api.openweathermap.org/data/2.5/weather"


def _http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=HTTP_TIMEOUT)


def _response_data(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


# ==============================================================================
# Tool: HTTP Request
# ==============================================================================

async def _http_request(args: dict[str, Any]) -> dict[str, Any]:
    method = (args.get("method") or "GET").upper()
    url = args.get("url")
    if not url:
        return {"error": "url is required"}

    body = args.get("body")
    request_kwargs: dict[str, Any] = {"headers": args.get("headers") or {}}
    if isinstance(body, (dict, list)):
        request_kwargs["json"] = body
    elif body is not None:
        request_kwargs["content"] = str(body)

    try:
        async with _http_client() as client:
            response = await client.request(method, url, **request_kwargs)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        return {
            "error": str(e),
            "status": e.response.status_code,
            "data": _response_data(e.response),
        }
    except httpx.RequestError as e:
        logger.warning(f"HTTP request to {url} failed: {e}")
        return {"error": str(e) or type(e).__name__, "status": None, "data": None}

    return {
        "status": response.status_code,
        "status_text": response.reason_phrase,
        "data": _response_data(response),
        "headers": dict(response.headers),
    }


http_request_tool = Tool(
    name="http_request",
    description="Make HTTP requests to external APIs or services",
    execute=_http_request,
    parameters={
        "type": "object",
        "properties": {
            "method": {"type": "string", "description": "GET, POST, PUT, DELETE..."},
            "url": {"type": "string"},
            "headers": {"type": "object"},
            "body": {"description": "JSON body or raw text"},
        },
        "required": ["url"],
    },
)


# ==============================================================================
# Tool: File System
# ==============================================================================

def _file_operation(operation: str, path: Path, content: str | None) -> dict[str, Any]:
    if operation == "read":
        return {"content": path.read_text(encoding="utf-8")}
    if operation == "write":
        path.write_text(content or "", encoding="utf-8")
        return {"success": True, "message": "File written successfully"}
    if operation == "exists":
        return {"exists": path.exists()}
    return {"error": f"Unsupported operation: {operation}"}


async def _file_system(args: dict[str, Any]) -> dict[str, Any]:
    operation = args.get("operation")
    path = args.get("path")
    if not path:
        return {"error": "path is required"}

    try:
        return await asyncio.to_thread(_file_operation, operation, Path(path), args.get("content"))
    except OSError as e:
        return {"error": str(e)}


file_system_tool = Tool(
    name="file_system",
    description="Read and write files (basic operations)",
    execute=_file_system,
    parameters={
        "type": "object",
        "properties": {
            "operation": {"type": "string", "enum": ["read", "write", "exists"]},
            "path": {"type": "string"},
            "content": {"type": "string"},
        },
        "required": ["operation", "path"],
    },
)


# ==============================================================================
# Tool: Calculator
# ==============================================================================

# Names the calculator accepts; anything else is rejected before parsing
ALLOWED_NAMES = {
    "sqrt", "sin", "cos", "tan", "asin", "acos", "atan",
    "log", "ln", "exp", "abs", "floor", "ceiling", "pi", "E",
}
_ALLOWED_CHARS = re.compile(r"^[0-9A-Za-z+\-*/^%()., ]*$")
_NAME = re.compile(r"[A-Za-z_]+")
_TRANSFORMATIONS = standard_transformations + (convert_xor,)


def calculate(expression: str) -> dict[str, Any]:
    """
    Evaluate a math expression.

    Supports + - * / % ^ (or **), parentheses and the functions/constants in
    ALLOWED_NAMES.

    Returns:
        {"result", "expression"} or {"error"}
    """
    invalid = {"error": "Invalid mathematical expression"}
    if not expression or not expression.strip() or not _ALLOWED_CHARS.match(expression):
        return invalid
    if any(name not in ALLOWED_NAMES for name in _NAME.findall(expression)):
        return invalid

    try:
        value = N(parse_expr(expression.replace("ln(", "log("), transformations=_TRANSFORMATIONS))
    except (SympifyError, SyntaxError, TypeError, ValueError, ZeroDivisionError):
        return invalid
    except Exception as e:
        logger.debug(f"Calculation error for '{expression}': {e}")
        return invalid

    if not value.is_number or not value.is_real:
        return invalid

    result = float(value)
    if result.is_integer():
        result = int(result)
    return {"result": result, "expression": expression}


async def _calculator(args: dict[str, Any]) -> dict[str, Any]:
    return calculate(str(args.get("expression", "")))


calculator_tool = Tool(
    name="calculator",
    description="Perform mathematical calculations",
    execute=_calculator,
    parameters={
        "type": "object",
        "properties": {"expression": {"type": "string", "description": "e.g. (2 + 3) * 4"}},
        "required": ["expression"],
    },
)


# ==============================================================================
# Tool: Date / Time
# ==============================================================================

def _describe_moment(moment: datetime, fmt: str | None) -> dict[str, Any]:
    return {
        "timestamp": int(moment.timestamp() * 1000),
        "iso": moment.isoformat(),
        "formatted": moment.strftime(fmt) if fmt else moment.ctime(),
    }


async def _datetime(args: dict[str, Any]) -> dict[str, Any]:
    operation = args.get("operation", "now")
    fmt = args.get("format")

    if operation == "now":
        return _describe_moment(datetime.now(timezone.utc), fmt)
    if operation == "format":
        date = args.get("date")
        if not date:
            return {"error": "Date is required for format operation"}
        try:
            moment = datetime.fromisoformat(str(date).replace("Z", "+00:00"))
        except ValueError:
            return {"error": f"Invalid date: {date}"}
        return _describe_moment(moment, fmt)
    return {"error": f"Unsupported operation: {operation}"}


datetime_tool = Tool(
    name="datetime",
    description="Get current date/time or format dates",
    execute=_datetime,
    parameters={
        "type": "object",
        "properties": {
            "operation": {"type": "string", "enum": ["now", "format"]},
            "date": {"type": "string", "description": "ISO 8601 date"},
            "format": {"type": "string", "description": "strftime pattern"},
        },
    },
)


# ==============================================================================
# Tool: Weather
# ==============================================================================

async def _weather(args: dict[str, Any]) -> dict[str, Any]:
    location = args.get("location")
    api_key = args.get("api_key") or args.get("apiKey")
    if not api_key:
        return {"error": "Weather API key is required"}
    if not location:
        return {"error": "location is required"}

    try:
        async with _http_client() as client:
            response = await client.get(
                WEATHER_API,
                params={"q": location, "appid": api_key, "units": "metric"},
            )
            response.raise_for_status()
            data = response.json()
        return {
            "location": location,
            "temperature": data["main"]["temp"],
            "description": data["weather"][0]["description"],
            "humidity": data["main"]["humidity"],
            "wind_speed": data["wind"]["speed"],
        }
    except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
        logger.warning(f"Weather lookup for {location} failed: {e}")
        return {"error": "Failed to fetch weather data"}


weather_tool = Tool(
    name="weather",
    description="Get weather information for a location",
    execute=_weather,
    parameters={
        "type": "object",
        "properties": {
            "location": {"type": "string"},
            "api_key": {"type": "string", "description": "OpenWeatherMap API key"},
        },
        "required": ["location", "api_key"],
    },
)


DEFAULT_TOOLS = [
    http_request_tool,
    file_system_tool,
    calculator_tool,
    datetime_tool,
    weather_tool,
]
