"""Protocol layer: function table, request builders, envelopes and the wire codec."""

from .functions import Function, PayloadKind, build_request
from .messages import Request, Response
from .codec import encode_request, decode_response
from .status import Result, is_success
