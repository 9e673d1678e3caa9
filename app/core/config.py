import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()  # Carga las variables de entorno

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./ledger.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")

# Meses hacia adelante que el generador de extractos proyecta por defecto
FUTURE_STATEMENT_MONTHS = int(os.getenv("FUTURE_STATEMENT_MONTHS", "5"))

# Diferencia máxima aceptada entre la suma de un pago dividido y el total del extracto
SETTLEMENT_TOLERANCE = Decimal(os.getenv("SETTLEMENT_TOLERANCE", "0.01"))

LOCK_TIMEOUT_SECONDS = float(os.getenv("LOCK_TIMEOUT_SECONDS", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
