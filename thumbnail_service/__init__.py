"""
Product thumbnail microservice package.

Exposes reusable primitives for fetching source images, rendering thumbnails,
persisting artifacts and catalog records, and processing stream batches.
"""
