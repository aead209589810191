"""Transport to the automation service's command port."""

from .nng_connection import NNGConnection
