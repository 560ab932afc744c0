import traceback


class Failure(Exception):
    """
    Carries an arbitrary error value through the errback side of a
    Deferred chain.  The original value is available as `value`; it is
    usually an exception but may be anything, e.g. a plain string.
    """
    def __init__(self, value=None):
        super(Failure, self).__init__("%s - %s" % (type(value).__name__, value))
        self._value = value

    @property
    def value(self):
        return self._value

    def __repr__(self):
        return "<%s.%s object at 0x%x; value: %r>" % (self.__class__.__module__,
                                                      self.__class__.__name__,
                                                      id(self),
                                                      self.value)

    def check(self, *error_types):
        for error_type in error_types:
            if isinstance(self.value, error_type):
                return error_type
        return None

    def trap(self, *error_types):
        # meant to be called from an errback: re-raising keeps the
        # failure travelling down the chain untouched
        error_type = self.check(*error_types)
        if error_type is None:
            raise self
        return error_type

    def get_traceback(self):
        value = self.value
        if not isinstance(value, BaseException) or value.__traceback__ is None:
            return str(self)
        return ''.join(traceback.format_exception(type(value), value,
                                                  value.__traceback__))
