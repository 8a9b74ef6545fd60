"""
Service layer for S3-compatible object storage calls.

This module wraps the boto3 client behind a small interface,
separating dispatch logic from SDK concerns.
"""
