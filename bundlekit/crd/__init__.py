"""Custom resource records and conversions to and from the bundle model."""