API_VERSION_HEADER = "X-Directory-Version"
REQUEST_ID_HEADER = "X-Request-ID"

# JWT Configuration
JWT_ALGORITHM = "HS256"
BEARER_SCHEME = "bearer"

# Access token claims written by the token issuer
JWT_SUBJECT_CLAIM = "sub"
JWT_COMPANY_CLAIM = "companyId"
JWT_CONTEXT_CLAIM = "context"

# Request logging is skipped for these paths
SKIP_LOGGING_PATHS = {
    "/health",
}
