from samplegraph.services.normalizer import direction_for, transform

__all__ = ["direction_for", "transform"]
