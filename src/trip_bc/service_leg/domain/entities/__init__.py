from .service_leg import ServiceLeg

__all__ = ["ServiceLeg"]
