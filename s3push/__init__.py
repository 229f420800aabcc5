"""s3push: one-way local directory to S3 prefix sync"""
__version__ = "0.1.0"
