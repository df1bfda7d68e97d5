from inbo.api.client import ApiClient, decode_json
from inbo.api.routing import RequestContext

__all__ = ["ApiClient", "RequestContext", "decode_json"]
