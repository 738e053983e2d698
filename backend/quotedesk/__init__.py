"""QuoteDesk: lead capture and Amadeus search proxy for a travel agency site."""

__version__ = "0.1.0"
