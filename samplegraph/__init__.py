"""SampleGraph: sample-relationship lookups over the Genius API with a cache in front."""

__version__ = "1.0.0"
