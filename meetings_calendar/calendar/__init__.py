"""Calendar data model, date-time codec and recurrence rule sets for meetings_calendar."""
