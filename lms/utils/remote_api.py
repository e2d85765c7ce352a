import copy
import requests
from flask import current_app, has_app_context
import logging
import traceback

from .defaults import DEFAULT_COLLECTIONS


logger = logging.getLogger(__name__)

class RemoteAPI:
    """Read-only client for the remote catalog tier.

    Every failure (network error, non-200 status, unexpected body) degrades to
    an empty collection; nothing here raises to the caller.
    """

    def __init__(self, base_url=None, token=None, timeout=None, verify_ssl=None):
        config = current_app.config if has_app_context() else {}
        self.base_url = (base_url if base_url is not None else config.get('REMOTE_API_URL') or '').rstrip('/')
        self.token = token if token is not None else config.get('REMOTE_API_TOKEN')
        self.timeout = timeout or config.get('REMOTE_API_TIMEOUT', 10)
        self.verify_ssl = verify_ssl if verify_ssl is not None else config.get('VERIFY_SSL', True)
        self.session = requests.Session()
        self.session.verify = self.verify_ssl

        if self.base_url:
            logger.info(f"Initialized RemoteAPI with base_url: {self.base_url}")
        else:
            logger.debug("No remote API configured, serving the bundled default catalog")

    def _get_headers(self):
        headers = {
            'Accept': 'application/json',
            'User-Agent': 'VocationalLMS/1.0'
        }
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def get_collection(self, resource, field=None):
        """GET ``<base>/<resource>`` and return ``body[field or resource]``"""
        field = field or resource
        if not self.base_url:
            return copy.deepcopy(DEFAULT_COLLECTIONS.get(field, []))

        url = f"{self.base_url}/{resource}"
        try:
            logger.info(f"Fetching {field} from {url}")
            response = self.session.get(url, headers=self._get_headers(), timeout=self.timeout)

            if response.status_code != 200:
                logger.warning(f"Failed to fetch {resource}: {response.status_code}")
                logger.warning(f"Response content: {response.text[:500]}")
                return []

            data = response.json()
            records = data.get(field) if isinstance(data, dict) else None
            if not isinstance(records, list):
                logger.warning(f"Unexpected response format from {url}")
                return []

            logger.info(f"Successfully fetched {len(records)} {field}")
            return [record for record in records if isinstance(record, dict)]

        except ValueError as e:
            logger.error(f"Failed to parse JSON response from {url}: {str(e)}")
            return []
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching {resource}: {str(e)}")
            logger.debug(f"Traceback: {traceback.format_exc()}")
            return []
