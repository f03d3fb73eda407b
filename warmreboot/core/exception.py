EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_HANDSHAKE_FAILURE = 10

class RebootError(Exception):
   CODE = EXIT_FAILURE

   def __init__(self, msg, code=None):
      super(RebootError, self).__init__(msg)
      self.msg = msg
      self.code = self.CODE if code is None else code

   def __str__(self):
      return '%s: %s (code %d)' % (self.__class__.__name__, self.msg, self.code)

class ClassificationError(RebootError):
   pass

class HandshakeError(RebootError):
   CODE = EXIT_HANDSHAKE_FAILURE

class SnapshotError(RebootError):
   pass

class StoreError(RebootError):
   pass

class PeerError(RebootError):
   pass
