from inbo.proxy.app import create_proxy_app

__all__ = ["create_proxy_app"]
