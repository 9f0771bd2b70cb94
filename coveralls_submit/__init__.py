"""Convert coverage reports to the Coveralls job format and upload them."""

__version__ = "0.1.0"
