from .base import Transport
from .curl_transport import CurlTransport
from .httpx_transport import HttpxTransport

TRANSPORTS = {
    CurlTransport.name: CurlTransport,
    HttpxTransport.name: HttpxTransport,
}

__all__ = ['Transport', 'CurlTransport', 'HttpxTransport', 'TRANSPORTS']
