"""Tour operator proposal pricing, lifecycle and voucher management."""

__version__ = "0.1.0"


# The CLI pulls in every command module, so only import it on demand
def __getattr__(name):
    if name == "main":
        from tourops.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
