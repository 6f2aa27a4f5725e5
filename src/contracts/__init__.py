"""Wire-level constants shared between the runtime and its clients."""
