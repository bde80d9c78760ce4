"""Rules domain: user-defined categorization rules and the engine applying them."""
