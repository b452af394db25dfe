"""Configuration management for the price comparer application."""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class DatabaseConfig:
    """Database configuration."""
    
    def __init__(self):
        self.user = os.getenv('DB_USER', 'postgres')
        self.host = os.getenv('DB_HOST', 'localhost')
        self.database = os.getenv('DB_NAME', 'grocery_prices')
        self.password = os.getenv('DB_PASSWORD', 'postgres')
        self.port = int(os.getenv('DB_PORT', '5432'))
        self.min_pool_size = int(os.getenv('DB_MIN_POOL_SIZE', '1'))
        self.max_pool_size = int(os.getenv('DB_MAX_POOL_SIZE', '10'))


class AppConfig:
    """Application configuration."""
    
    def __init__(self):
        self.log_level = os.getenv('LOG_LEVEL', 'INFO')
        self.debug = os.getenv('DEBUG', 'false').lower() == 'true'
        self.admin_emails = [
            email.strip().lower()
            for email in os.getenv('ADMIN_EMAILS', 'admin@example.com').split(',')
            if email.strip()
        ]
        # Create a placeholder user record as soon as a request is approved
        self.materialize_temp_users = os.getenv('MATERIALIZE_TEMP_USERS', 'true').lower() == 'true'
        self.default_language = os.getenv('DEFAULT_LANGUAGE', 'en')


class ExchangeRateConfig:
    """Exchange rate source configuration."""
    
    def __init__(self):
        self.url = os.getenv('EXCHANGE_RATE_URL', 'https://open.er-api.com/v6/latest/SEK')
        self.source = os.getenv('EXCHANGE_RATE_SOURCE', 'ExchangeRate-API.com')
        self.cache_hours = float(os.getenv('EXCHANGE_RATE_CACHE_HOURS', '4'))
        self.fallback_rate = float(os.getenv('EXCHANGE_RATE_FALLBACK', '0.69'))
        self.timeout = float(os.getenv('HTTP_TIMEOUT', '10'))


class SupabaseConfig:
    """Identity provider configuration."""
    
    def __init__(self):
        self.url = os.getenv('SUPABASE_URL')
        self.anon_key = os.getenv('SUPABASE_ANON_KEY')
        self.timeout = float(os.getenv('HTTP_TIMEOUT', '10'))


# Global configuration instances
db_config = DatabaseConfig()
app_config = AppConfig()
exchange_rate_config = ExchangeRateConfig()
supabase_config = SupabaseConfig()
