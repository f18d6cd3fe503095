# Commands package
