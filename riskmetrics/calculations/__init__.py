"""Pure numerical calculations from price series to risk/return statistics."""
