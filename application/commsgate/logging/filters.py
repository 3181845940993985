"""
Logging filters for commsgate
"""
import logging
import uuid
from commsgate.middlewares.request_context import request_context


class RequestContextFilter(logging.Filter):
    def filter(self, record):
        record.request_id = request_context.request_id or str(uuid.uuid4())
        record.request_method = request_context.request_method or ''
        record.request_path = request_context.request_path or ''
        record.client_ip = request_context.client_ip or ''
        return True


class DeliveryContextFilter(logging.Filter):
    """Attach the provider/channel of the message being handled, if any"""

    def filter(self, record):
        record.provider = request_context.provider or ''
        record.channel = request_context.channel or ''
        return True
