def auth_context(request):
    """Expose the request's auth context to templates."""
    context = getattr(request, 'auth_context', None)
    return {
        'auth_context': context,
        'current_profile': context.profile if context is not None else None,
    }
