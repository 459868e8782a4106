import json
import boto3
import os
import time
from typing import Dict
import logging

logger = logging.getLogger(__name__)

class SecretsManager:
    """
    Reads Official's credentials from AWS Secrets Manager.

    Values are cached for `cache_ttl` seconds; if a refresh fails after that,
    the last value read is served instead of raising.
    """

    def __init__(self, region_name: str = None, client=None, cache_ttl: int = 300):
        self.region_name = region_name or os.environ.get('AWS_REGION', 'us-east-1')
        self.cache_ttl = cache_ttl
        self._client = client
        self._cache: Dict[str, tuple] = {}

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.session.Session().client(
                service_name='secretsmanager',
                region_name=self.region_name
            )
        return self._client

    def clear_cache(self):
        self._cache.clear()

    def get_secret(self, secret_id: str) -> str:
        cached = self._cache.get(secret_id)
        if cached and time.time() - cached[1] < self.cache_ttl:
            return cached[0]

        try:
            value = self.client.get_secret_value(SecretId=secret_id)['SecretString']
        except Exception as e:
            if cached:
                logger.warning(f"Refreshing secret {secret_id} failed, serving cached value: {e}")
                return cached[0]
            logger.error(f"Failed to get secret {secret_id}: {e}")
            raise

        self._cache[secret_id] = (value, time.time())
        return value

    def get_db_credentials(self) -> Dict[str, str]:
        """Username and password of the RDS-managed PostgreSQL secret."""
        return json.loads(self.get_secret(os.environ.get('DATABASE_SECRETS_NAME', 'official-db-credentials')))

    def get_twilio_credentials(self) -> Dict[str, str]:
        return json.loads(self.get_secret(os.environ.get('TWILIO_SECRETS_NAME', 'twilio-credentials')))

    def get_api_key(self, service_name: str) -> str:
        return self.get_secret(f'{service_name}-api-key')
