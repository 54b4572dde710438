"""Provider adapters implementing the `Invoker` callable."""
