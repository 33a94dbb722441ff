"""Web3 Project Hunt API."""
