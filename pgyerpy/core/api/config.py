"""
API configuration module.

Provides configuration for the Pgyer HTTP transport and the upload
settings read from the environment or a properties file.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, Mapping, Union
import ssl

DEFAULT_PASSWORD = '1P@ssword'
API_KEY_ENV = 'PGY_API_KEY'
PASSWORD_ENV = 'PGY_DOWNLOAD_PASSWORD'


@dataclass
class ProxyConfig:
    """
    Proxy configuration.
    
    Supports HTTP and HTTPS proxies.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    
    def to_aiohttp_proxy(self) -> Optional[str]:
        """Convert to aiohttp proxy format."""
        if not self.url:
            return None
        
        if self.username and self.password and '://' in self.url:
            protocol, rest = self.url.split('://', 1)
            return f"{protocol}://{self.username}:{self.password}@{rest}"
        
        return self.url


@dataclass
class SSLConfig:
    """SSL/TLS configuration."""
    verify: bool = True
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    check_hostname: bool = True
    
    def create_ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """Create SSL context from configuration (False disables verification)."""
        if not self.verify:
            return False
        
        context = ssl.create_default_context()
        
        if self.ca_file:
            context.load_verify_locations(self.ca_file)
        
        if self.cert_file:
            context.load_cert_chain(
                self.cert_file,
                keyfile=self.key_file
            )
        
        context.check_hostname = self.check_hostname
        
        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.
    
    Granular control over different timeout types.
    """
    total: float = 300.0  # Total request timeout, uploads included
    connect: float = 30.0
    sock_read: float = 60.0
    sock_connect: float = 30.0
    
    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class APIConfig:
    """
    Complete transport configuration.
    
    Centralizes endpoints, headers, timeouts, TLS and proxy settings.
    """
    # Credential endpoint issuing COS upload tokens
    token_url: str = 'https://api.pgyer.com/apiv2/app/getCOSToken'
    
    # Base of the public download page, joined with the build id
    download_base_url: str = 'https://pgyer.com'
    
    user_agent: str = 'pgyerpy/1.0.0'
    
    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    
    extra_headers: Dict[str, str] = field(default_factory=dict)
    
    log_level: int = 20  # logging.INFO
    
    @classmethod
    def default(cls) -> 'APIConfig':
        """Create default configuration."""
        return cls()
    
    @classmethod
    def with_proxy(cls, proxy_url: str, **kwargs) -> 'APIConfig':
        """Create configuration with proxy."""
        return cls(
            proxy=ProxyConfig(url=proxy_url),
            **kwargs
        )
    
    @classmethod
    def insecure(cls, **kwargs) -> 'APIConfig':
        """Create configuration with SSL verification disabled."""
        return cls(
            ssl=SSLConfig(verify=False, check_hostname=False),
            **kwargs
        )
    
    def download_url(self, build_id: str) -> str:
        """Public download page for an uploaded build."""
        return f"{self.download_base_url.rstrip('/')}/{build_id}"
    
    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'ssl': self.ssl.create_ssl_context(),
        }
    
    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }
        
        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }


def parse_properties(text: str) -> Dict[str, str]:
    """Parse `key=value` (or `key: value`) lines, skipping comments."""
    values: Dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(('#', '!')):
            continue
        if '=' in line:
            key, value = line.split('=', 1)
        elif ':' in line:
            key, value = line.split(':', 1)
        else:
            continue
        key = key.strip()
        if key:
            values[key] = value.strip()
    return values


@dataclass(frozen=True)
class UploadSettings:
    """
    Credentials for one upload run.
    
    Attributes:
        api_key: Pgyer API key (``PGY_API_KEY``)
        password: Download password for the build (``PGY_DOWNLOAD_PASSWORD``),
            defaults to ``DEFAULT_PASSWORD`` when unset
    """
    api_key: Optional[str] = None
    password: str = DEFAULT_PASSWORD
    
    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> 'UploadSettings':
        """Build settings from any key/value source using the PGY_* names."""
        return cls(
            api_key=values.get(API_KEY_ENV) or None,
            password=values.get(PASSWORD_ENV) or DEFAULT_PASSWORD,
        )
    
    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'UploadSettings':
        """Read settings from environment variables."""
        return cls.from_mapping(os.environ if environ is None else environ)
    
    @classmethod
    def from_properties(cls, path: Union[str, Path]) -> 'UploadSettings':
        """Read settings from a ``gradle.properties`` style file."""
        text = Path(path).read_text(encoding='utf-8')
        return cls.from_mapping(parse_properties(text))
    
    def merged(self, api_key: Optional[str] = None, password: Optional[str] = None) -> 'UploadSettings':
        """Return a copy where explicit values override the stored ones."""
        return UploadSettings(
            api_key=api_key or self.api_key,
            password=password or self.password,
        )
