"""Tax pipeline: slabs → deductions → calculator → comparator → optimizer."""
