"""JSON response rendering for API payloads."""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from fastapi.responses import JSONResponse


class InkwellJSONEncoder(json.JSONEncoder):
  """Encode the non-native values that session and catalog payloads carry."""

  def default(self, obj: Any) -> Any:
    if isinstance(obj, Decimal):
      return int(obj) if obj % 1 == 0 else float(obj)
    if isinstance(obj, datetime | date):
      return obj.isoformat()
    if isinstance(obj, Enum):
      return obj.value
    return super().default(obj)


class InkwellJSONResponse(JSONResponse):
  """Compact UTF-8 JSON response that understands datetimes, enums and decimals."""

  def render(self, content: Any) -> bytes:
    return json.dumps(content, ensure_ascii=False, allow_nan=False, indent=None, separators=(",", ":"), cls=InkwellJSONEncoder).encode("utf-8")
