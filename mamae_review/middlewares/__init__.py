from mamae_review.middlewares.correlation_id import CorrelationIdMiddleware

__all__ = ["CorrelationIdMiddleware"]
