"""
tracebin test suite.

- Exception fingerprinting tests
- SigV4 signing tests
- S3 storage driver tests
- Request sender tests
- Credentials provider tests
- Log processor tests
"""
