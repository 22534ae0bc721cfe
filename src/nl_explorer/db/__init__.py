"""Query execution backends.

The language model *writes* the query; these executors run it and normalize
whatever comes back into a ``ResultTable`` of string cells.

Backends supported:
  - PostgreSQL : relational, credentials from AWS Secrets Manager
  - Athena     : serverless SQL on S3, auth via the AWS credential chain
  - Neptune    : openCypher over Bolt/TLS
"""
