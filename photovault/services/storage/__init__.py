from .s3 import S3Service, S3ServiceError

__all__ = ["S3Service", "S3ServiceError"]
