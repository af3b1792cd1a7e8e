"""Calendar operations of meetings_calendar: event calculation, lookup and edits."""
