"""
JSON formatters for commsgate logs
"""
import json
import logging
from datetime import datetime

from commsgate.config.settings import GatewayConfigs
configs = GatewayConfigs()

SERVICE_NAME = configs.APP_NAME


class BaseJSONFormatter(logging.Formatter):
    """One JSON object per record"""

    include_message = True

    def __init__(self):
        super().__init__()
        self.application_environment = configs.APPLICATION_ENVIRONMENT

    def format(self, record):
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line_number': record.lineno,
            'environment': self.application_environment,
            'service': SERVICE_NAME,
        }
        if self.include_message:
            log_entry['message'] = record.getMessage()

        if record.exc_info:
            log_entry['exception'] = str(record.exc_info[1])
            log_entry['exception_type'] = record.exc_info[0].__name__ if record.exc_info[0] else ''

        self.add_extra_fields(log_entry, record)

        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def add_extra_fields(self, log_entry, record):
        pass


class AppLogsJSONFormatter(BaseJSONFormatter):
    def add_extra_fields(self, log_entry, record):
        log_entry['request_id'] = getattr(record, 'request_id', '')
        log_entry['request_method'] = getattr(record, 'request_method', '')
        log_entry['request_path'] = getattr(record, 'request_path', '')
        log_entry['provider'] = getattr(record, 'provider', '')
        log_entry['channel'] = getattr(record, 'channel', '')


class AuditLogsJSONFormatter(BaseJSONFormatter):
    """Audit records carry their payload in `extra`; the message text is dropped"""

    include_message = False

    def add_extra_fields(self, log_entry, record):
        log_entry['request_id'] = getattr(record, 'request_id', '')
        log_entry['client_ip'] = getattr(record, 'client_ip', '')

        log_entry['duration'] = getattr(record, 'duration', 0.0)
        log_entry['hostname'] = getattr(record, 'hostname', '')
        log_entry['app_name'] = getattr(record, 'app_name', '')
        log_entry['version'] = getattr(record, 'version', '')
        log_entry['module_name'] = getattr(record, 'module_name', '')

        request_data = getattr(record, 'request', None)
        response_data = getattr(record, 'response', None)
        log_entry['request'] = json.dumps(request_data, ensure_ascii=False, default=str) if request_data else ''
        log_entry['response'] = json.dumps(response_data, ensure_ascii=False, default=str) if response_data else ''

        log_entry['request_method'] = getattr(record, 'request_method', '')
        log_entry['request_path'] = getattr(record, 'request_path', '')
        log_entry['size_in_bytes'] = getattr(record, 'size_in_bytes', 0)
        log_entry['status_code'] = getattr(record, 'status_code', 0)
