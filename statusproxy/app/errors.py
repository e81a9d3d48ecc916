class StatusProxyError(Exception):
    """Base class for errors raised by the status proxy."""


class ConfigError(StatusProxyError):
    """Malformed configuration; raised at load time."""


class ServiceNotFound(StatusProxyError):
    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(f'Service "{service_name}" not found in API response')
