"""Field Pay - GST breakdowns, pay-period schedules and trial analytics for field contractors."""

__version__ = "0.3.0"
