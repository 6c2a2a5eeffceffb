import logging
from pbr.version import VersionInfo
import requests


LOG = logging.getLogger(__name__)


class APIException(Exception):
    pass


def get_version():
    try:
        return VersionInfo('tarstream').version_string()
    except Exception:
        return '0.0.0'


def get_user_agent():
    return 'Mozilla/5.0 (Ubuntu; Linux x86_64) tarstream/%s' % get_version()


def request_url(method, url, headers=None, stream=False):
    if not headers:
        headers = {}
    headers.update({'User-Agent': get_user_agent()})
    r = requests.request(method, url, headers=headers, stream=stream)

    LOG.debug('-------------------------------------------------------')
    LOG.debug('HTTP client requested: %s %s (stream=%s)'
              % (method, url, stream))
    for h in headers:
        LOG.debug('Header: %s = %s' % (h, headers[h]))
    LOG.debug('HTTP client response: code = %s' % r.status_code)
    for h in r.headers:
        LOG.debug('Header: %s = %s' % (h, r.headers[h]))
    LOG.debug('-------------------------------------------------------')

    if r.status_code != 200:
        raise APIException(
            'HTTP request failed', method, url, r.status_code, r.headers)
    return r
